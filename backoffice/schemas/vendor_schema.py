from marshmallow import fields, validate, EXCLUDE
from backoffice.extensions import ma


class VendorCreateSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    vendor_name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    username = fields.String(required=True, validate=validate.Length(min=1))
    token = fields.String(required=True, validate=validate.Length(min=1))


class VendorUpdateSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    vendor_name = fields.String(validate=validate.Length(min=1, max=100))
    username = fields.String()
    token = fields.String()
    status = fields.String(validate=validate.OneOf(["active", "inactive"]))


class DidRateSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    vendor_id = fields.Integer(required=True, strict=True)
    rate_type = fields.String(required=True, validate=validate.OneOf(["random", "blocks"]))
    rate = fields.Decimal(required=True, places=2, validate=validate.Range(min=0, max=9999999.99))
