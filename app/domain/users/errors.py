from __future__ import annotations


class UserExistsError(Exception):
    def __init__(self):
        super().__init__("user with email already exists")


class UserNotFoundError(LookupError):
    def __init__(self):
        super().__init__("user not found")


class InvalidCredentialsError(PermissionError):
    def __init__(self):
        super().__init__("invalid credentials")
