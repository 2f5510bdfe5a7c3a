import re

from marshmallow import fields, ValidationError


class AccountId(fields.Field):
    """Account ids arrive as ints or strings; stored as strings."""

    def _deserialize(self, value, attr, data, **kwargs):
        if isinstance(value, bool) or not isinstance(value, (str, int)) or not str(value).strip():
            raise ValidationError("Not a valid account id.")
        return str(value).strip()


class DidNumber(fields.Field):
    """A number to buy: "8885550100" or a search candidate / {"dids": "..."} object."""

    def _deserialize(self, value, attr, data, **kwargs):
        if isinstance(value, dict):
            number = value.get("did") or value.get("dids") or value.get("id")
            if not number:
                raise ValidationError("Missing number.")
            return {**value, "did": str(number)}
        if isinstance(value, (str, int)) and not isinstance(value, bool) and str(value).strip():
            return str(value).strip()
        raise ValidationError("Not a valid number.")


class Prefix(fields.Field):
    """Dialing prefix given as digits, either a string or an int."""

    def _deserialize(self, value, attr, data, **kwargs):
        if isinstance(value, bool) or not isinstance(value, (str, int)):
            raise ValidationError("Prefix must be numeric.")
        value = str(value).strip()
        if not re.fullmatch(r"[0-9]{1,20}", value):
            raise ValidationError("Prefix must be numeric.")
        return value
