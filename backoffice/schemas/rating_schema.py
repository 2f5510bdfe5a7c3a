from marshmallow import fields, validate, EXCLUDE
from backoffice.extensions import ma
from backoffice.schemas.common import Prefix

_name = dict(required=True, validate=validate.Length(min=1, max=255))


class DestinationSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    name = fields.String(**_name)
    prefix = Prefix(required=True)


class RateSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    name = fields.String(**_name)
    connect_fee = fields.Decimal(required=True, places=4, validate=validate.Range(min=0))
    rate = fields.Decimal(required=True, places=4, validate=validate.Range(min=0, max=9999999.9999))
    rate_unit = fields.String(required=True, validate=validate.Length(min=1, max=20))
    rate_increment = fields.String(required=True, validate=validate.Length(min=1, max=20))
    group_interval_start = fields.String(required=True, validate=validate.Length(min=1, max=20))


class DestinationRateSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    name = fields.String(**_name)
    destination_id = fields.Integer(required=True, strict=True)
    rate_id = fields.Integer(required=True, strict=True)
    rounding_method = fields.String(required=True, validate=validate.Length(min=1, max=20))
    rounding_decimals = fields.Integer(required=True, strict=True, validate=validate.Range(min=0, max=10))
    max_cost = fields.Decimal(required=True, places=2, validate=validate.Range(min=0, max=9999999.99))
    max_cost_strategy = fields.String(required=True, validate=validate.Length(min=1, max=20))
