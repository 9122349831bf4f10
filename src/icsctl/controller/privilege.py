import ctypes

from icsctl.exceptions import PrivilegeRequiredError


def is_admin() -> bool:
    try:
        return bool(ctypes.windll.shell32.IsUserAnAdmin())
    except (AttributeError, OSError):
        # no windll outside Windows
        return False


def require_admin() -> None:
    """Fail unless the current process is elevated."""
    if not is_admin():
        raise PrivilegeRequiredError(
            "Administrator privileges are required to manage Internet Connection Sharing. "
            "Run icsctl from an elevated prompt."
        )
