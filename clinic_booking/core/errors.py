from fastapi import HTTPException, status


class InvalidInput(HTTPException):
    def __init__(self, detail: str = "Invalid input"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class Unauthorized(HTTPException):
    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class Forbidden(HTTPException):
    def __init__(self, detail: str = "Not enough permissions"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFound(HTTPException):
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class SlotConflict(HTTPException):
    def __init__(self, detail: str = "This time slot is already booked"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class DeliveryFailed(HTTPException):
    def __init__(self, detail: str = "Failed to send reset code"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class InvalidCode(HTTPException):
    def __init__(self, detail: str = "Invalid reset code"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class CodeExpired(HTTPException):
    def __init__(self, detail: str = "Reset code has expired"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class RateLimited(HTTPException):
    def __init__(self, detail: str = "Too many requests. Please try again later."):
        super().__init__(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=detail)
