"""User operations: identity userinfo and web experience profiles."""
from __future__ import annotations

from typing import Any

from integrations.paypal.http import PayPalHTTP

from ..dispatcher import OperationDefinition
from ..schemas import CreateWebProfileArgs, GetUserInfoArgs, GetWebProfilesArgs

__all__ = ["OPERATIONS"]

WEB_PROFILES_PATH = "/v1/payment-experience/web-profiles"


async def get_userinfo(args: GetUserInfoArgs, http: PayPalHTTP) -> Any:
    """Fetch the profile of the user who granted *args.access_token*.

    The caller's token is sent instead of the gateway's own credential, against
    the configured environment.
    """

    return await http.get_json(
        "/v1/identity/oauth2/userinfo",
        params={"schema": "paypalv1.1"},
        headers={"Authorization": f"Bearer {args.access_token}"},
    )


async def create_web_profile(args: CreateWebProfileArgs, http: PayPalHTTP) -> Any:
    return await http.post_json(WEB_PROFILES_PATH, args.to_payload())


async def get_web_profiles(args: GetWebProfilesArgs, http: PayPalHTTP) -> Any:
    profiles = await http.get_json(WEB_PROFILES_PATH)
    # an empty body decodes to {}; the tool always answers with a list
    return profiles or []


OPERATIONS = [
    OperationDefinition(
        name="get_userinfo",
        description="Retrieve user information",
        arguments=GetUserInfoArgs,
        handler=get_userinfo,
        authenticated=False,
    ),
    OperationDefinition(
        name="create_web_profile",
        description="Create a web experience profile",
        arguments=CreateWebProfileArgs,
        handler=create_web_profile,
    ),
    OperationDefinition(
        name="get_web_profiles",
        description="Get list of web experience profiles",
        arguments=GetWebProfilesArgs,
        handler=get_web_profiles,
    ),
]
