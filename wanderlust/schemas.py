from marshmallow import Schema, fields, validate, EXCLUDE


class FormSchema(Schema):
    # Forms also post csrf_token and other fields we do not model
    class Meta:
        unknown = EXCLUDE


class SignupSchema(FormSchema):
    username = fields.Str(required=True, validate=validate.Length(min=3, max=80))
    email = fields.Email(required=True)
    password = fields.Str(required=True, validate=validate.Length(min=6))


class UserLoginSchema(FormSchema):
    username = fields.Str(required=True, validate=validate.Length(min=1))
    password = fields.Str(required=True, validate=validate.Length(min=1))


class ListingSchema(FormSchema):
    title = fields.Str(required=True, validate=validate.Length(min=1, max=200))
    description = fields.Str(required=True, validate=validate.Length(min=1))
    image_url = fields.Str(load_default="", validate=validate.Length(max=500))
    price = fields.Int(required=True, validate=validate.Range(min=0))
    location = fields.Str(required=True, validate=validate.Length(min=1, max=200))
    country = fields.Str(required=True, validate=validate.Length(min=1, max=100))


class ReviewSchema(FormSchema):
    comment = fields.Str(required=True, validate=validate.Length(min=1))
    rating = fields.Int(required=True, validate=validate.Range(min=1, max=5))
