"""Argument models for identity and web-experience-profile operations."""
from __future__ import annotations

from typing import Annotated, Optional

from pydantic import Field, StrictInt

from .common import ArgumentsModel, PayPalObject, Url, required

__all__ = ["GetUserInfoArgs", "CreateWebProfileArgs", "GetWebProfilesArgs"]

Flag = Annotated[StrictInt, Field(ge=0, le=1)]


class GetUserInfoArgs(ArgumentsModel):
    access_token: Annotated[str, required("Access token is required"), Field(repr=False)]


class Presentation(PayPalObject):
    brand_name: Optional[str] = None
    logo_image: Optional[Url] = None
    locale_code: Optional[str] = None


class InputFields(PayPalObject):
    no_shipping: Optional[Flag] = None
    address_override: Optional[Flag] = None


class FlowConfig(PayPalObject):
    landing_page_type: Optional[str] = None
    bank_txn_pending_url: Optional[Url] = None


class CreateWebProfileArgs(ArgumentsModel):
    name: Annotated[str, required("Profile name is required")]
    presentation: Optional[Presentation] = None
    input_fields: Optional[InputFields] = None
    flow_config: Optional[FlowConfig] = None


class GetWebProfilesArgs(ArgumentsModel):
    pass
