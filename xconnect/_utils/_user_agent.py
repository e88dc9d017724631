import importlib.metadata

from .constants import HEADER_USER_AGENT


def user_agent_value() -> str:
    product = "XConnect.Python"

    try:
        version = importlib.metadata.version("xconnect")
    except importlib.metadata.PackageNotFoundError:
        version = "unknown"

    return f"{product}/{version}"


def header_user_agent() -> dict[str, str]:
    return {HEADER_USER_AGENT: user_agent_value()}
