from flask import request
from flask_wtf import FlaskForm
from werkzeug.datastructures import ImmutableMultiDict


def request_formdata():
    """Form data from a JSON body (scalars only, null as blank) or a regular form post"""
    if not request.is_json:
        return request.form

    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return ImmutableMultiDict()

    data = {}
    for key, value in payload.items():
        if isinstance(value, (dict, list)):
            continue
        if value is None:
            data[key] = ""
        elif isinstance(value, bool):
            data[key] = "y" if value else ""
        else:
            data[key] = str(value)
    return ImmutableMultiDict(data)


class ApiForm(FlaskForm):
    """Base form for JSON endpoints - authenticated by token, not CSRF"""

    class Meta:
        csrf = False

    @classmethod
    def from_request(cls, **kwargs):
        return cls(formdata=request_formdata(), **kwargs)

    def error_payload(self, message="Invalid input"):
        return {"error": message, "fields": self.errors}
