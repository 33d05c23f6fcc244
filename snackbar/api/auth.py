import secrets

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials


# Setup Basic Auth Security object
security = HTTPBasic()

def authenticate(
    request: Request,
    credentials: HTTPBasicCredentials = Depends(security)
) -> str:
    """Implements Basic Authentication against the configured admin credentials.

    Args:
        request (Request): The incoming request; its app carries the Settings.
        credentials (HTTPBasicCredentials): The credentials provided via the
            Authorization header in the request.

    Returns:
        str: The authenticated username.

    Raises:
        HTTPException: 401 status code if credentials do not match the configuration.
    """
    settings = request.app.state.settings

    # Use secrets.compare_digest to prevent timing attacks
    is_user_ok = secrets.compare_digest(
        credentials.username.encode(), settings.ADMIN_USERNAME.encode()
    )
    is_pass_ok = secrets.compare_digest(
        credentials.password.encode(), settings.ADMIN_PASSWORD.encode()
    )

    if not (is_user_ok and is_pass_ok):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username
