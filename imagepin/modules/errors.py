"""Typed errors raised while resolving and pinning images."""


class ImagePinError(RuntimeError):
    """Base imagepin error."""


class MalformedReferenceError(ImagePinError):
    """Image reference has no name component."""

    def __init__(self, text: str):
        super().__init__(f"Malformed image reference {text!r}: missing image name")
        self.text = text


class AuthError(ImagePinError):
    """Token endpoint refused to issue a pull token."""

    def __init__(self, host: str, status: int, detail: str = ""):
        message = f"Could not fetch auth token from {host}. [{status}]"
        if detail:
            message = f"{message} {detail}"
        super().__init__(message)
        self.host = host
        self.status = status


class RegistryError(ImagePinError):
    """Registry v2 API call failed with a status other than 404."""

    def __init__(self, url: str, status: int, detail: str = ""):
        message = f"Could not fetch data from {url}. [{status}]"
        if detail:
            message = f"{message} {detail}"
        super().__init__(message)
        self.url = url
        self.status = status
