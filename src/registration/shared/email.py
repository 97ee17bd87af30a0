"""EmailAddress value object shared by billing and student details."""

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from registration.domain import registration

_FORBIDDEN = (";", ",", "(", ")", '"', ":", "<", ">", "[", "]", "\\")


def _invalid(email):
    return ValidationError({"address": [f"Invalid email address: {email!r}"]})


@registration.value_object
class EmailAddress:
    """A structurally valid email address.

    Exactly one @, non-empty local and domain parts without edge dots, no
    consecutive dots, no forbidden characters. The domain is either a dotted
    name without hyphen-edged labels or a bracketed literal such as
    ``[127.0.0.1]``.
    """

    address: String(required=True, max_length=254)

    @invariant.post
    def verify_email_address(self):
        email = self.address

        if " " in email or "\t" in email or "\n" in email:
            raise _invalid(email)

        if email.count("@") != 1:
            raise _invalid(email)

        local_part, domain_part = email.split("@", 1)
        bracketed = domain_part.startswith("[") and domain_part.endswith("]")

        if not local_part or local_part.startswith(".") or local_part.endswith("."):
            raise _invalid(email)

        if not domain_part or domain_part.startswith(".") or domain_part.endswith("."):
            raise _invalid(email)

        if not bracketed:
            if "." not in domain_part:
                raise _invalid(email)
            if any(label.startswith("-") or label.endswith("-") for label in domain_part.split(".")):
                raise _invalid(email)

        if ".." in local_part or ".." in domain_part:
            raise _invalid(email)

        for forbidden in _FORBIDDEN:
            if forbidden in email and not (forbidden in "[]" and bracketed):
                raise _invalid(email)


def is_valid_email(address: str | None) -> bool:
    """True when ``address`` would make a valid EmailAddress.

    Billing and student forms report problems as messages, so a failed
    value object is turned into False instead of being raised.
    """
    if not address:
        return False
    try:
        EmailAddress(address=address)
    except ValidationError:
        return False
    return True
