"""Request/response helpers for the HTTP tests."""


def as_player(token: str, cookie_name: str = "shirid") -> dict[str, str]:
    """Request headers presenting ``token`` as the session cookie."""
    return {"Cookie": f"{cookie_name}={token}"}


def session_cookie(response, cookie_name: str = "shirid") -> tuple[str, str]:
    """
    Extract the session cookie from a response.

    Returns:
        (value, full Set-Cookie header)
    """
    for header in response.headers.get_list("set-cookie"):
        name, _, rest = header.partition("=")
        if name.strip() == cookie_name:
            return rest.split(";", 1)[0], header
    raise AssertionError(f"no {cookie_name} cookie in response")
