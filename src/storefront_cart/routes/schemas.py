from marshmallow import Schema, fields, validate


class AddCartItemSchema(Schema):
    slug = fields.Str(required=True, validate=validate.Length(min=1, max=255))


class UpdateCartItemSchema(Schema):
    quantity = fields.Int(required=True, strict=True, validate=validate.Range(min=0, max=999))


class CheckoutSchema(Schema):
    nonce = fields.Str(required=True, validate=validate.Length(min=1))
