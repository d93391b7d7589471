import subprocess

import stackdriver_adapter


def get_version() -> str:
    # the version string was patched by a release - return __version__ which will be correct
    if stackdriver_adapter.__version__ != "dev":
        return stackdriver_adapter.__version__

    # we are running from an unreleased dev version
    try:
        tag = subprocess.check_output(["git", "describe", "--tags"], stderr=subprocess.DEVNULL).decode().strip()
        status = subprocess.check_output(["git", "status", "--porcelain"], stderr=subprocess.DEVNULL).decode().strip()
    except (OSError, subprocess.CalledProcessError):
        return stackdriver_adapter.__version__

    return f"{tag}-dirty" if status else tag
