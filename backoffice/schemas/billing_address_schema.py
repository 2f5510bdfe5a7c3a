from marshmallow import fields, validate, EXCLUDE
from backoffice.extensions import ma
from backoffice.schemas.common import AccountId

_required_text = dict(required=True, validate=validate.Length(min=1, max=255))


class BillingAddressSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    account_id = AccountId(required=True)
    fullname = fields.String(**_required_text)
    contact_no = fields.String(required=True, validate=validate.Length(min=1, max=50))
    email = fields.Email(required=True)
    address = fields.String(**_required_text)
    zip = fields.String(required=True, validate=validate.Length(min=1, max=20))
    city = fields.String(required=True, validate=validate.Length(min=1, max=100))
    state = fields.String(required=True, validate=validate.Length(min=1, max=100))
    country = fields.String(required=True, validate=validate.Length(min=1, max=100))
    default = fields.Boolean(load_default=False)


class SetDefaultAddressSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    id = fields.Integer(required=True, strict=True)
    account_id = AccountId(required=True)
