"""
Shared fixtures: an in-memory directory with the same async interface as
GraphDirectory.
"""

import asyncio
import itertools

import pytest
from kiota_abstractions.api_error import APIError
from msgraph.generated.models.o_data_errors.o_data_error import ODataError

from permissionConfig import ToolConfig


GRAPH_SP_ID = "11111111-0000-0000-0000-000000000001"
GRAPH_APP_ID = "00000003-0000-0000-c000-000000000000"
KEYVAULT_SP_ID = "11111111-0000-0000-0000-000000000002"
IDENTITY_ID = "22222222-0000-0000-0000-000000000001"
TWIN_A_ID = "22222222-0000-0000-0000-000000000002"
TWIN_B_ID = "22222222-0000-0000-0000-000000000003"

SITES_READ = "aaaaaaaa-0000-0000-0000-000000000001"
USER_READ = "aaaaaaaa-0000-0000-0000-000000000002"
MAIL_SEND = "aaaaaaaa-0000-0000-0000-000000000003"
DELEGATED_ONLY = "aaaaaaaa-0000-0000-0000-000000000004"
DISABLED_ROLE = "aaaaaaaa-0000-0000-0000-000000000005"
SECRETS_GET = "bbbbbbbb-0000-0000-0000-000000000001"


def app_role(role_id, value, member_types=("Application",), enabled=True):
    return {
        "id": role_id,
        "displayName": value,
        "value": value,
        "description": f"Allows {value}",
        "isEnabled": enabled,
        "allowedMemberTypes": list(member_types),
    }


def service_principal(sp_id, name, app_id=None, sp_type="ManagedIdentity", roles=None):
    return {
        "id": sp_id,
        "displayName": name,
        "appId": app_id or sp_id,
        "servicePrincipalType": sp_type,
        "appRoles": roles or [],
    }


class FakeDirectory:
    """In-memory stand-in for GraphDirectory."""

    def __init__(self, service_principals, assignments=None):
        self.service_principals = {sp["id"]: sp for sp in service_principals}
        self.assignments = list(assignments or [])
        self.created = []
        self.deleted = []
        self.create_errors = {}  # app_role_id -> error raised on create
        self.delete_errors = {}  # assignment_id -> error raised on delete
        self._ids = itertools.count(1)

    async def get_service_principal(self, object_id):
        return self.service_principals.get(object_id)

    async def find_service_principals_by_display_name(self, display_name):
        return [sp for sp in self.service_principals.values() if sp["displayName"] == display_name]

    async def find_service_principals_by_app_id(self, app_id):
        return [sp for sp in self.service_principals.values() if sp["appId"] == app_id]

    async def list_app_role_assignments(self, principal_id):
        return [dict(a) for a in self.assignments if a["principalId"] == principal_id]

    async def create_app_role_assignment(self, principal_id, resource_id, app_role_id):
        if app_role_id in self.create_errors:
            raise self.create_errors[app_role_id]
        assignment = {
            "id": f"assignment-{next(self._ids)}",
            "principalId": principal_id,
            "principalType": "ServicePrincipal",
            "principalDisplayName": self.service_principals[principal_id]["displayName"],
            "resourceId": resource_id,
            "resourceDisplayName": self.service_principals[resource_id]["displayName"],
            "appRoleId": app_role_id,
        }
        self.assignments.append(assignment)
        self.created.append(assignment)
        return dict(assignment)

    async def delete_app_role_assignment(self, principal_id, assignment_id):
        if assignment_id in self.delete_errors:
            raise self.delete_errors[assignment_id]
        self.assignments = [a for a in self.assignments if a["id"] != assignment_id]
        self.deleted.append(assignment_id)


def assignment(assignment_id, principal_id, resource_id, app_role_id, resource_name, principal_type="ServicePrincipal"):
    return {
        "id": assignment_id,
        "principalId": principal_id,
        "principalType": principal_type,
        "principalDisplayName": "func-orders",
        "resourceId": resource_id,
        "resourceDisplayName": resource_name,
        "appRoleId": app_role_id,
    }


def odata_error(status_code):
    error = ODataError()
    error.response_status_code = status_code
    return error


def api_error(status_code):
    """Error the SDK raises for failed responses that carry no OData body."""
    error = APIError()
    error.response_status_code = status_code
    return error


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def graph_sp():
    return service_principal(
        GRAPH_SP_ID,
        "Microsoft Graph",
        app_id=GRAPH_APP_ID,
        sp_type="Application",
        roles=[
            app_role(SITES_READ, "Sites.Read.All"),
            app_role(USER_READ, "User.Read.All"),
            app_role(MAIL_SEND, "Mail.Send"),
            app_role(DELEGATED_ONLY, "Notes.Read", member_types=("User",)),
            app_role(DISABLED_ROLE, "Reports.Read.All", enabled=False),
        ],
    )


@pytest.fixture
def keyvault_sp():
    return service_principal(
        KEYVAULT_SP_ID,
        "Contoso Secrets API",
        sp_type="Application",
        roles=[app_role(SECRETS_GET, "Secrets.Get")],
    )


@pytest.fixture
def make_directory(graph_sp, keyvault_sp):
    """Build independent directories holding the same objects."""
    def build():
        return FakeDirectory(
            [
                graph_sp,
                keyvault_sp,
                service_principal(IDENTITY_ID, "func-orders"),
                service_principal(TWIN_A_ID, "func-twin"),
                service_principal(TWIN_B_ID, "func-twin"),
            ],
            assignments=[
                assignment("existing-sites", IDENTITY_ID, GRAPH_SP_ID, SITES_READ, "Microsoft Graph"),
            ],
        )
    return build


@pytest.fixture
def directory(make_directory):
    return make_directory()


@pytest.fixture
def config():
    return ToolConfig()
