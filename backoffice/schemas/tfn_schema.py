from marshmallow import fields, validate, validates_schema, ValidationError, EXCLUDE
from backoffice.extensions import ma
from backoffice.schemas.common import AccountId, DidNumber


class TfnSearchSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    searchType = fields.String(required=True, validate=validate.Length(min=1))
    quantity = fields.Integer(required=True, strict=True, validate=validate.Range(min=1))
    npa = fields.Integer(required=True, strict=True)


class TfnPurchaseSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    vendorId = fields.Integer(required=True, strict=True)
    didQty = fields.Integer(required=True, strict=True, validate=validate.Range(min=1))
    rate = fields.Decimal(required=True, validate=validate.Range(min=0, min_inclusive=False))
    accountId = AccountId(required=True)
    dids = fields.List(DidNumber(), load_default=None)
    requestId = fields.String(load_default=None, validate=validate.Length(min=1, max=100))
    searchType = fields.String(load_default="tollfree")
    npa = fields.Integer(strict=True, load_default=None)

    @validates_schema
    def check_dids_match_quantity(self, data, **kwargs):
        dids = data.get("dids")
        if dids is None:
            return
        numbers = [n["did"] if isinstance(n, dict) else n for n in dids]
        if len(set(numbers)) != len(numbers):
            raise ValidationError("The numbers must be distinct.", "dids")
        if data.get("didQty") is not None and len(dids) != data["didQty"]:
            raise ValidationError(f"Exactly {data['didQty']} numbers are required.", "dids")
