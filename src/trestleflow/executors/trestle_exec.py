"""
trestle_exec.py
---------------
Implements TrestleExecutor: validates phone numbers (Phone Intelligence API)
and verifies contacts (Real Contact API) for every input item.
"""
from typing import Any, Dict, Optional
from urllib.parse import quote

from ..config import settings
from ..credentials import TrestleApiCredential
from ..errors import MissingFieldError
from ..parameters import NodeProperty
from ..schemas import HttpRequest
from .base import SKIP, BaseExecutor, ExecutionContext

PHONE_VALIDATION = "phoneValidation"
REAL_CONTACT = "realContact"

# Characters JavaScript's encodeURIComponent leaves alone
_URI_COMPONENT_SAFE = "-_.!~*'()"

# (body key, parameter naming the source field)
_OPTIONAL_CONTACT_FIELDS = (
    ("email", "emailField"),
    ("ip", "ipAddressField"),
    ("address", "addressField"),
    ("city", "cityField"),
    ("state", "stateField"),
    ("postal_code", "postalCodeField"),
)


def register(register_executor):
    register_executor("trestle", TrestleExecutor)


def encode_uri_component(value: Any) -> str:
    # render values the way JavaScript stringifies them: true, 5 not True, 5.0
    if isinstance(value, bool):
        value = "true" if value else "false"
    elif isinstance(value, float) and value.is_integer():
        value = int(value)
    return quote(str(value), safe=_URI_COMPONENT_SAFE)


def phone_validation_request(base_url: str, phone: Any, country_hint: Optional[str] = None,
                             litigator_check: bool = False) -> HttpRequest:
    query = f"phone={encode_uri_component(phone)}"
    if country_hint:
        query += f"&phone.country_hint={encode_uri_component(country_hint)}"
    if litigator_check:
        query += "&addons=litigator_check"
    return HttpRequest(method="GET", url=f"{base_url}/3.0/phone_intel?{query}")


def real_contact_request(base_url: str, name: Any, phone: Any, optional: Dict[str, Any],
                         email_deliverability: bool = False, litigator_check: bool = False) -> HttpRequest:
    body = {"name": name, "phone": phone}
    for key, value in optional.items():
        if value:
            body[key] = value

    addons = []
    if email_deliverability:
        addons.append("email_deliverability")
    if litigator_check:
        addons.append("litigator_check")
    if addons:
        body["addons"] = ",".join(addons)

    return HttpRequest(
        method="POST",
        url=f"{base_url}/1.1/real_contact",
        headers={"Content-Type": "application/json"},
        body=body,
    )


class TrestleExecutor(BaseExecutor):
    name = "trestle"
    display_name = "Trestle"
    version = 2
    group = "transform"
    description = "Validate phone numbers, emails, and contacts using Trestle APIs."
    credentials = [TrestleApiCredential.name]
    properties = [
        NodeProperty("resource", PHONE_VALIDATION, "Resource", "options",
                     options=(PHONE_VALIDATION, REAL_CONTACT)),
        NodeProperty("operation", "validate", "Operation", "options",
                     show_for_resources=(PHONE_VALIDATION,), options=("validate",)),
        NodeProperty("operation", "verify", "Operation", "options",
                     show_for_resources=(REAL_CONTACT,), options=("verify",)),
        NodeProperty("phoneField", "phone", "Phone Number Field", required=True,
                     description="Field name containing phone numbers in input data",
                     show_for_resources=(PHONE_VALIDATION, REAL_CONTACT)),
        NodeProperty("countryHint", "", "Country Hint",
                     description="The ISO-3166 alpha-2 country code of the phone number (e.g., US)",
                     show_for_resources=(PHONE_VALIDATION,)),
        NodeProperty("nameField", "name", "Name Field", required=True,
                     description="Field name containing contact names in input data",
                     show_for_resources=(REAL_CONTACT,)),
        NodeProperty("emailField", "email", "Email Field", show_for_resources=(REAL_CONTACT,)),
        NodeProperty("ipAddressField", "ip", "IP Address Field", show_for_resources=(REAL_CONTACT,)),
        NodeProperty("addressField", "address", "Address Field", show_for_resources=(REAL_CONTACT,)),
        NodeProperty("cityField", "city", "City Field", show_for_resources=(REAL_CONTACT,)),
        NodeProperty("stateField", "state", "State Field", show_for_resources=(REAL_CONTACT,)),
        NodeProperty("postalCodeField", "postal_code", "Postal Code Field", show_for_resources=(REAL_CONTACT,)),
        NodeProperty("includeEmailDeliverability", False, "Include Email Deliverability", "boolean",
                     description="Whether to include email deliverability checks (additional cost)",
                     show_for_resources=(REAL_CONTACT,)),
        NodeProperty("includeLitigatorCheck", False, "Include Litigator Check", "boolean",
                     description="Whether to include litigator checks (additional cost)",
                     show_for_resources=(PHONE_VALIDATION, REAL_CONTACT)),
    ]

    def __init__(self, base_url: Optional[str] = None):
        self.base_url = (base_url or settings.TRESTLE_BASE_URL).rstrip("/")

    def _phone_validation(self, item, index, get) -> HttpRequest:
        phone_field = get("phoneField", index)
        phone = item.get(phone_field)
        if not phone:
            raise MissingFieldError("Phone number", phone_field, item_index=index)
        return phone_validation_request(
            self.base_url,
            phone,
            country_hint=get("countryHint", index),
            litigator_check=bool(get("includeLitigatorCheck", index)),
        )

    def _real_contact(self, item, index, get) -> HttpRequest:
        name_field = get("nameField", index)
        phone_field = get("phoneField", index)
        optional = {key: item.get(get(param, index)) for key, param in _OPTIONAL_CONTACT_FIELDS}

        name = item.get(name_field)
        phone = item.get(phone_field)
        if not name:
            raise MissingFieldError("Name", name_field, item_index=index)
        if not phone:
            raise MissingFieldError("Phone number", phone_field, item_index=index)

        return real_contact_request(
            self.base_url,
            name,
            phone,
            optional,
            email_deliverability=bool(get("includeEmailDeliverability", index)),
            litigator_check=bool(get("includeLitigatorCheck", index)),
        )

    def build_request(self, item: Dict[str, Any], index: int, context: ExecutionContext) -> Optional[HttpRequest]:
        """The request for the item at index, or None when no operation applies."""
        get = context.get_parameter
        resource = get("resource", index)
        operation = get("operation", index)

        # Anything else, batchValidate included, emits nothing
        if resource == PHONE_VALIDATION and operation == "validate":
            return self._phone_validation(item, index, get)
        if resource == REAL_CONTACT and operation == "verify":
            return self._real_contact(item, index, get)
        return None

    def process_item(self, item, index, context):
        request = self.build_request(item, index, context)
        if request is None:
            return SKIP
        return context.http.request_with_authentication(
            self.credential_type(), request, credential_name=context.credential)
