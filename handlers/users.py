"""
User handlers for the kefir tracker API.

User records are created lazily from the Cognito identity; these endpoints
expose the profile and manage push notification devices.
"""

from handlers.common import ensure_user, users
from models.device import DeviceRegister
from utils.decorators import (extract_path_params, lambda_handler,
                              require_auth, validate_json_body)
from utils.responses import created_response, success_response


@lambda_handler()
@require_auth
def get_me(event, context):
    """
    Get the authenticated user's profile.

    GET /me
    """
    auth = event["auth"]
    user = users.ensure_user(auth["user_id"], auth["email"])
    return success_response({"user": user})


@lambda_handler()
@require_auth
@ensure_user
@validate_json_body(DeviceRegister)
def register_device(event, context):
    """
    Register (or refresh) a device's Expo push token.

    POST /me/devices
    """
    device = users.register_device(event["auth"]["user_id"], event["payload"])
    return created_response({"device": device})


@lambda_handler()
@require_auth
@ensure_user
def list_devices(event, context):
    devices = users.list_devices(event["auth"]["user_id"])
    return success_response({"devices": devices, "count": len(devices)})


@lambda_handler()
@require_auth
@ensure_user
@extract_path_params("id")
def unregister_device(event, context):
    users.unregister_device(event["auth"]["user_id"], event["path_params"]["id"])
    return success_response(message="Device unregistered successfully")
