from folio.errors import ValidationError


def _join_labels(labels: list[str]) -> str:
    if len(labels) == 1:
        return labels[0]
    if len(labels) == 2:
        return f"{labels[0]} and {labels[1]}"
    return ", ".join(labels[:-1]) + f", and {labels[-1]}"


def validate_required(**fields: str) -> None:
    """Ensure every given field is a non-empty string.

    The message lists all required fields, not only the missing ones:
    validate_required(email="", password="x") -> "Email and password are required"

    Raises:
        ValidationError: If any field is empty
    """
    if all(fields.values()):
        return

    labels = [name.replace("_", " ") for name in fields]
    message = _join_labels(labels)
    verb = "is" if len(labels) == 1 else "are"
    raise ValidationError(f"{message[0].upper()}{message[1:]} {verb} required")


def validate_password(password: str) -> None:
    """Validate password fits the hashing scheme.

    bcrypt only uses the first 72 bytes of its input.

    Raises:
        ValidationError: If the password is longer than 72 bytes in UTF-8
    """
    if len(password.encode("utf-8")) > 72:
        raise ValidationError("Password must be at most 72 bytes long")
