"""
Microsoft Graph access for service principals and app role assignments.

Everything the permission tool reads from or writes to the directory goes
through GraphDirectory. Results are returned as plain dictionaries keyed the
way Graph names the properties (id, displayName, appRoles, resourceId, ...).
"""

import re
import time
from uuid import UUID

import httpx
from msgraph import GraphServiceClient
from msgraph.generated.models.app_role_assignment import AppRoleAssignment
from msgraph.generated.service_principals.service_principals_request_builder import (
    ServicePrincipalsRequestBuilder,
)

from permissionConfig import ToolConfig


GUID_PATTERN = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)

SERVICE_PRINCIPAL_FIELDS = ["id", "displayName", "appId", "servicePrincipalType", "appRoles"]

# Well-known API service principal App IDs
WELL_KNOWN_APIS = {
    "microsoft-graph": "00000003-0000-0000-c000-000000000000",
    "graph": "00000003-0000-0000-c000-000000000000",
    "sharepoint": "00000003-0000-0ff1-ce00-000000000000",
    "exchange": "00000002-0000-0ff1-ce00-000000000000",
    "azure-management": "797f4846-ba00-4fd7-ba43-dac1f8f63013",
    "key-vault": "cfa8b339-82a2-471a-a3c9-0fc0be7a4093",
    "storage": "e406a681-f3d4-42a8-90b6-c2b029497af1",
}


def is_guid(value: str) -> bool:
    return bool(value) and bool(GUID_PATTERN.match(value))


def odata_quote(value: str) -> str:
    """Quote a string literal for an OData $filter expression."""
    return "'" + value.replace("'", "''") + "'"


def app_role_to_dict(role) -> dict:
    return {
        "id": str(role.id) if role.id else None,
        "displayName": role.display_name,
        "value": role.value,
        "description": role.description,
        "isEnabled": role.is_enabled,
        "allowedMemberTypes": list(role.allowed_member_types or []),
    }


def service_principal_to_dict(sp) -> dict:
    return {
        "id": str(sp.id) if sp.id else None,
        "displayName": sp.display_name,
        "appId": str(sp.app_id) if sp.app_id else None,
        "servicePrincipalType": sp.service_principal_type,
        "appRoles": [app_role_to_dict(role) for role in (sp.app_roles or [])],
    }


def assignment_to_dict(assignment) -> dict:
    return {
        "id": assignment.id,
        "principalId": str(assignment.principal_id) if assignment.principal_id else None,
        "principalType": assignment.principal_type,
        "principalDisplayName": assignment.principal_display_name,
        "resourceId": str(assignment.resource_id) if assignment.resource_id else None,
        "resourceDisplayName": assignment.resource_display_name,
        "appRoleId": str(assignment.app_role_id) if assignment.app_role_id else None,
    }


class GraphDirectory:
    """Directory operations backed by Microsoft Graph."""

    def __init__(self, credential, config: ToolConfig = None, client=None, transport=None):
        """
        Args:
            credential: Azure credential with a synchronous get_token()
            config: ToolConfig carrying the Graph endpoint, scopes and timeout
            client: GraphServiceClient to use instead of building one
            transport: httpx transport for raw Graph requests (tests use a MockTransport)
        """
        self.config = config or ToolConfig()
        self.credential = credential
        self.client = client or GraphServiceClient(
            credentials=credential,
            scopes=self.config.scopes,
        )
        self.transport = transport
        self._token_cache = {}  # scope -> (token, expires_on)

    def _get_token(self, scope: str) -> str:
        """Get an access token, reusing a cached one until five minutes before expiry."""
        if scope in self._token_cache:
            cached_token, expires_on = self._token_cache[scope]
            if time.time() < expires_on - 300:
                return cached_token

        token = self.credential.get_token(scope)
        self._token_cache[scope] = (token.token, token.expires_on)
        return token.token

    def _http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(http2=False, timeout=self.config.timeout, transport=self.transport)

    async def get_service_principal(self, object_id: str) -> dict:
        """
        Fetch a service principal by object ID.

        Returns:
            Service principal dictionary, or None when the directory has no such object
        """
        token = self._get_token(self.config.scopes[0])

        async with self._http_client() as client:
            response = await client.get(
                f"{self.config.graph_endpoint}/servicePrincipals/{object_id}",
                headers={"Authorization": f"Bearer {token}", "Content-Type": "application/json"},
                params={"$select": ",".join(SERVICE_PRINCIPAL_FIELDS)},
            )

        # Graph answers 400 for IDs that are not valid object identifiers
        if response.status_code in (400, 404):
            return None
        response.raise_for_status()

        sp = response.json()
        return {
            "id": sp.get("id"),
            "displayName": sp.get("displayName"),
            "appId": sp.get("appId"),
            "servicePrincipalType": sp.get("servicePrincipalType"),
            "appRoles": [
                {
                    "id": role.get("id"),
                    "displayName": role.get("displayName"),
                    "value": role.get("value"),
                    "description": role.get("description"),
                    "isEnabled": role.get("isEnabled"),
                    "allowedMemberTypes": role.get("allowedMemberTypes") or [],
                }
                for role in (sp.get("appRoles") or [])
            ],
        }

    async def _query_service_principals(self, odata_filter: str) -> list:
        query_params = ServicePrincipalsRequestBuilder.ServicePrincipalsRequestBuilderGetQueryParameters(
            filter=odata_filter,
            select=SERVICE_PRINCIPAL_FIELDS,
        )
        request_config = ServicePrincipalsRequestBuilder.ServicePrincipalsRequestBuilderGetRequestConfiguration(
            query_parameters=query_params,
        )

        service_principals = []
        result = await self.client.service_principals.get(request_configuration=request_config)

        if result and result.value:
            service_principals.extend(result.value)

            # Handle pagination
            while result.odata_next_link:
                result = await self.client.service_principals.with_url(result.odata_next_link).get()
                if result and result.value:
                    service_principals.extend(result.value)

        return [service_principal_to_dict(sp) for sp in service_principals]

    async def find_service_principals_by_display_name(self, display_name: str) -> list:
        """Return every service principal whose display name equals display_name."""
        return await self._query_service_principals(f"displayName eq {odata_quote(display_name)}")

    async def find_service_principals_by_app_id(self, app_id: str) -> list:
        return await self._query_service_principals(f"appId eq {odata_quote(app_id)}")

    async def list_app_role_assignments(self, principal_id: str) -> list:
        """
        Get the app role assignments granted TO a service principal.

        Args:
            principal_id: Object ID of the service principal

        Returns:
            List of assignment dictionaries
        """
        assignments = []
        request_builder = self.client.service_principals.by_service_principal_id(principal_id).app_role_assignments

        result = await request_builder.get()

        if result and result.value:
            assignments.extend(result.value)

            # Handle pagination
            while result.odata_next_link:
                result = await request_builder.with_url(result.odata_next_link).get()
                if result and result.value:
                    assignments.extend(result.value)

        return [assignment_to_dict(assignment) for assignment in assignments]

    async def create_app_role_assignment(self, principal_id: str, resource_id: str, app_role_id: str) -> dict:
        """Assign app role app_role_id of resource resource_id to principal principal_id."""
        body = AppRoleAssignment(
            principal_id=UUID(principal_id),
            resource_id=UUID(resource_id),
            app_role_id=UUID(app_role_id),
        )
        created = await self.client.service_principals.by_service_principal_id(
            principal_id
        ).app_role_assignments.post(body)
        return assignment_to_dict(created)

    async def delete_app_role_assignment(self, principal_id: str, assignment_id: str):
        await self.client.service_principals.by_service_principal_id(
            principal_id
        ).app_role_assignments.by_app_role_assignment_id(assignment_id).delete()
