#!/usr/bin/env python3
"""
Grant and revoke application permissions (app role assignments) for Azure AD
managed identities.

This script uses Microsoft Graph to:
1. Resolve a managed identity by object ID or by its (unique) display name
2. Grant app roles of a target application to that identity, skipping the
   ones it already holds
3. Revoke named app roles of an application, or every application permission
   the identity holds
4. List the application permissions an API exposes, or the ones an identity holds

Requirements:
    pip install azure-identity msgraph-sdk httpx pyyaml

Authentication:
    Uses DefaultAzureCredential which supports multiple authentication methods:
    - Azure CLI (az login)
    - Environment variables
    - Managed Identity
    - Visual Studio Code credentials
    Pass --interactive to log in through the browser instead.

Required Graph permissions for the caller:
    - Application.Read.All (lookups)
    - AppRoleAssignment.ReadWrite.All (grant / revoke)
"""

import asyncio
import argparse
import json
from datetime import datetime
from enum import Enum

import httpx
from kiota_abstractions.api_error import APIError
from msgraph.generated.models.o_data_errors.o_data_error import ODataError

from appRoleDirectory import WELL_KNOWN_APIS, GraphDirectory, is_guid
from permissionConfig import ToolConfig, build_config, build_credential


class ResolutionStatus(Enum):
    NOT_FOUND = "not_found"
    AMBIGUOUS = "ambiguous"
    FOUND = "found"


class Resolution:
    """Outcome of looking a service principal up by ID or display name."""

    def __init__(self, status: ResolutionStatus, query: str, service_principal: dict = None, match_count: int = 0):
        self.status = status
        self.query = query
        self.service_principal = service_principal
        self.match_count = match_count

    @classmethod
    def from_matches(cls, query: str, matches: list) -> "Resolution":
        if not matches:
            return cls(ResolutionStatus.NOT_FOUND, query)
        if len(matches) > 1:
            return cls(ResolutionStatus.AMBIGUOUS, query, match_count=len(matches))
        return cls(ResolutionStatus.FOUND, query, service_principal=matches[0], match_count=1)

    @property
    def found(self) -> bool:
        return self.status is ResolutionStatus.FOUND

    def describe(self, kind: str) -> str:
        if self.status is ResolutionStatus.NOT_FOUND:
            return f"No {kind} found for '{self.query}'"
        if self.status is ResolutionStatus.AMBIGUOUS:
            return (
                f"{self.match_count} service principals match {kind} '{self.query}'; "
                "specify the object ID instead"
            )
        sp = self.service_principal
        return f"Found {kind}: {sp['displayName']} ({sp['id']})"

    def __repr__(self):
        return f"Resolution({self.status.name}, {self.query!r}, match_count={self.match_count})"


class ManagedIdentityPermissionManager:
    """Grant, revoke and list application permissions held by managed identities."""

    # principalType of assignments made to service principals (application permissions)
    APPLICATION_PRINCIPAL_TYPE = "ServicePrincipal"
    # allowedMemberTypes value of app roles that can be assigned to applications
    APPLICATION_MEMBER_TYPE = "Application"

    def __init__(self, directory, config: ToolConfig = None):
        """
        Args:
            directory: GraphDirectory (or any object with the same async methods)
            config: ToolConfig for this run
        """
        self.directory = directory
        self.config = config or ToolConfig()

    async def resolve_identity(self, identity_id: str = None, identity_name: str = None) -> Resolution:
        """
        Resolve a managed identity by object ID or by display name.

        Exactly one of identity_id / identity_name is expected. A display name
        must match a single service principal to resolve.
        """
        if identity_id:
            sp = await self.directory.get_service_principal(identity_id)
            return Resolution.from_matches(identity_id, [sp] if sp else [])

        if identity_name:
            matches = await self.directory.find_service_principals_by_display_name(identity_name)
            return Resolution.from_matches(identity_name, matches)

        return Resolution(ResolutionStatus.NOT_FOUND, "")

    async def resolve_application(self, application: str) -> Resolution:
        """
        Resolve the service principal of the target application.

        Accepts a display name, a well-known API alias (e.g. 'microsoft-graph')
        or an App ID GUID.
        """
        app_id = WELL_KNOWN_APIS.get(application.lower())
        if app_id is None and is_guid(application):
            app_id = application

        if app_id:
            matches = await self.directory.find_service_principals_by_app_id(app_id)
            if not matches and is_guid(application):
                # Fall back to treating the GUID as the service principal object ID
                sp = await self.directory.get_service_principal(application)
                matches = [sp] if sp else []
            return Resolution.from_matches(application, matches)

        matches = await self.directory.find_service_principals_by_display_name(application)
        return Resolution.from_matches(application, matches)

    async def get_application_assignments(self, principal_id: str) -> list:
        """Return the principal's app role assignments of application type."""
        assignments = await self.directory.list_app_role_assignments(principal_id)
        return [a for a in assignments if a.get("principalType") == self.APPLICATION_PRINCIPAL_TYPE]

    def find_app_role(self, application_sp: dict, permission_name: str) -> dict:
        """Find an enabled app role assignable to applications by its value (case-insensitive)."""
        permission_lower = permission_name.lower()
        for role in application_sp.get("appRoles", []):
            if not role.get("value") or role["value"].lower() != permission_lower:
                continue
            if not role.get("isEnabled"):
                continue
            if self.APPLICATION_MEMBER_TYPE in (role.get("allowedMemberTypes") or []):
                return role
        return None

    async def grant_permissions(
        self,
        application: str,
        permissions: list,
        identity_id: str = None,
        identity_name: str = None,
    ) -> dict:
        """
        Grant application permissions (app roles) of an application to a managed identity.

        Permissions the identity already holds on the application are reported
        and skipped. Names that match no application-assignable app role are
        reported and nothing is created for them.

        Args:
            application: Display name (or alias / App ID) of the target application
            permissions: Permission names, e.g. ['Sites.Read.All', 'User.Read.All']
            identity_id: Object ID of the managed identity
            identity_name: Display name of the managed identity

        Returns:
            Dictionary with 'success', 'identity', 'application' and per-permission 'items'
        """
        identity = await self.resolve_identity(identity_id, identity_name)
        if not identity.found:
            return self._unresolved("managed identity", identity)

        target = await self.resolve_application(application)
        if not target.found:
            return self._unresolved("application", target, identity=identity.service_principal)

        identity_sp = identity.service_principal
        application_sp = target.service_principal

        existing = await self.get_application_assignments(identity_sp["id"])
        granted_role_ids = {a["appRoleId"] for a in existing if a.get("resourceId") == application_sp["id"]}

        items = []
        for permission in unique_names(permissions):
            if self._held_role(application_sp, permission, granted_role_ids):
                items.append(self._item(permission, "already_granted", f"{permission} is already granted"))
                continue

            role = self.find_app_role(application_sp, permission)
            if role is None:
                items.append(self._item(
                    permission,
                    "not_found",
                    f"{application_sp['displayName']} has no application permission named {permission}",
                ))
                continue

            if self.config.dry_run:
                items.append(self._item(permission, "would_grant", f"Would grant {role['value']}"))
                continue

            try:
                created = await self.directory.create_app_role_assignment(
                    principal_id=identity_sp["id"],
                    resource_id=application_sp["id"],
                    app_role_id=role["id"],
                )
            except APIError as e:
                if e.response_status_code == 409:
                    items.append(self._item(permission, "already_granted", f"{role['value']} is already granted"))
                else:
                    items.append(self._item(permission, "failed", f"Failed to grant {role['value']}: {odata_message(e)}"))
                continue

            granted_role_ids.add(role["id"])
            items.append(self._item(
                permission,
                "granted",
                f"Granted {role['value']} to {identity_sp['displayName']}",
                assignment_id=created.get("id"),
            ))

        return self._result(identity_sp, items, application=application_sp)

    async def revoke_permissions(
        self,
        application: str = None,
        permissions: list = None,
        identity_id: str = None,
        identity_name: str = None,
        remove_all: bool = False,
    ) -> dict:
        """
        Revoke application permissions from a managed identity.

        With remove_all every application-type assignment the identity holds is
        deleted, whatever the resource. Otherwise only the assignments on
        `application` whose role value is in `permissions` are deleted; an
        empty permission list changes nothing.

        Returns:
            Dictionary with 'success', 'identity' and per-assignment 'items'
        """
        identity = await self.resolve_identity(identity_id, identity_name)
        if not identity.found:
            return self._unresolved("managed identity", identity)

        identity_sp = identity.service_principal

        if remove_all:
            assignments = await self.get_application_assignments(identity_sp["id"])
            role_names = await self.role_names_for(assignments)
            items = []
            for assignment in assignments:
                label = f"{assignment.get('resourceDisplayName') or assignment.get('resourceId')}: " \
                        f"{role_names.get(assignment['appRoleId'], assignment['appRoleId'])}"
                items.append(await self._delete_assignment(identity_sp, assignment, label))

            result = self._result(identity_sp, items)
            if not assignments:
                result["message"] = f"{identity_sp['displayName']} holds no application permissions"
            return result

        requested = unique_names(permissions or [])
        if not requested:
            result = self._result(identity_sp, [])
            result["message"] = "No permissions requested; nothing to revoke"
            return result

        if not application:
            return {
                "success": False,
                "identity": identity_sp,
                "items": [],
                "error": "An application is required to revoke permissions by name",
            }

        target = await self.resolve_application(application)
        if not target.found:
            return self._unresolved("application", target, identity=identity_sp)

        application_sp = target.service_principal
        role_values = {
            role["id"]: role["value"]
            for role in application_sp.get("appRoles", [])
            if role.get("value")
        }
        requested_lower = {name.lower(): name for name in requested}

        items = []
        matched = set()
        for assignment in await self.get_application_assignments(identity_sp["id"]):
            if assignment.get("resourceId") != application_sp["id"]:
                continue
            value = role_values.get(assignment.get("appRoleId"))
            if value is None or value.lower() not in requested_lower:
                continue
            matched.add(value.lower())
            items.append(await self._delete_assignment(identity_sp, assignment, value))

        for name_lower, name in requested_lower.items():
            if name_lower not in matched:
                items.append(self._item(name, "not_assigned", f"{name} is not assigned"))

        return self._result(identity_sp, items, application=application_sp)

    async def list_permissions(self, application: str) -> dict:
        """List the enabled app roles of an application that can be granted to applications."""
        target = await self.resolve_application(application)
        if not target.found:
            return self._unresolved("application", target)

        permissions = []
        for role in target.service_principal.get("appRoles", []):
            if role.get("isEnabled") and self.APPLICATION_MEMBER_TYPE in (role.get("allowedMemberTypes") or []):
                permissions.append({
                    "id": role["id"],
                    "name": role["value"],
                    "displayName": role["displayName"],
                    "description": role["description"],
                })

        return {
            "success": True,
            "application": target.service_principal,
            "permissions": sorted(permissions, key=lambda p: p.get("name") or ""),
        }

    async def list_assignments(self, identity_id: str = None, identity_name: str = None) -> dict:
        """List the application permissions a managed identity currently holds."""
        identity = await self.resolve_identity(identity_id, identity_name)
        if not identity.found:
            return self._unresolved("managed identity", identity)

        assignments = await self.get_application_assignments(identity.service_principal["id"])
        role_names = await self.role_names_for(assignments)

        return {
            "success": True,
            "identity": identity.service_principal,
            "assignments": [
                {
                    "id": a["id"],
                    "resourceId": a.get("resourceId"),
                    "resourceDisplayName": a.get("resourceDisplayName"),
                    "appRoleId": a.get("appRoleId"),
                    "permission": role_names.get(a.get("appRoleId"), a.get("appRoleId")),
                }
                for a in assignments
            ],
        }

    async def role_names_for(self, assignments: list) -> dict:
        """Map app role IDs used by the assignments to their values, one lookup per resource."""
        role_names = {}
        seen_resources = set()
        for assignment in assignments:
            resource_id = assignment.get("resourceId")
            if not resource_id or resource_id in seen_resources:
                continue
            seen_resources.add(resource_id)
            resource_sp = await self.directory.get_service_principal(resource_id)
            if not resource_sp:
                continue
            for role in resource_sp.get("appRoles", []):
                if role.get("value"):
                    role_names[role["id"]] = role["value"]
        return role_names

    def _held_role(self, application_sp: dict, permission: str, granted_role_ids: set) -> bool:
        permission_lower = permission.lower()
        for role in application_sp.get("appRoles", []):
            if role["id"] in granted_role_ids and role.get("value") and role["value"].lower() == permission_lower:
                return True
        return False

    async def _delete_assignment(self, identity_sp: dict, assignment: dict, label: str) -> dict:
        if self.config.dry_run:
            return self._item(label, "would_revoke", f"Would revoke {label}", assignment_id=assignment["id"])

        try:
            await self.directory.delete_app_role_assignment(identity_sp["id"], assignment["id"])
        except APIError as e:
            return self._item(label, "failed", f"Failed to revoke {label}: {odata_message(e)}",
                              assignment_id=assignment["id"])

        return self._item(
            label,
            "revoked",
            f"Revoked {label} from {identity_sp['displayName']}",
            assignment_id=assignment["id"],
        )

    @staticmethod
    def _item(permission: str, status: str, message: str, assignment_id: str = None) -> dict:
        item = {"permission": permission, "status": status, "message": message}
        if assignment_id:
            item["assignmentId"] = assignment_id
        return item

    @staticmethod
    def _result(identity_sp: dict, items: list, application: dict = None) -> dict:
        result = {
            "success": not any(item["status"] in FAILED_STATUSES for item in items),
            "identity": identity_sp,
            "items": items,
        }
        if application is not None:
            result["application"] = application
        return result

    @staticmethod
    def _unresolved(kind: str, resolution: Resolution, identity: dict = None) -> dict:
        result = {
            "success": False,
            "items": [],
            "error": resolution.describe(kind),
            "resolution": resolution.status.value,
        }
        if identity is not None:
            result["identity"] = identity
        return result


FAILED_STATUSES = {"failed", "not_found"}

STATUS_PREFIXES = {
    "granted": "[OK]",
    "revoked": "[OK]",
    "already_granted": "[SKIP]",
    "not_assigned": "[SKIP]",
    "would_grant": "[DRY-RUN]",
    "would_revoke": "[DRY-RUN]",
    "not_found": "[FAILED]",
    "failed": "[FAILED]",
}


def unique_names(names: list) -> list:
    """Drop blanks and case-insensitive duplicates, keeping the first spelling and order."""
    seen = set()
    result = []
    for name in names:
        name = (name or "").strip()
        if not name or name.lower() in seen:
            continue
        seen.add(name.lower())
        result.append(name)
    return result


def odata_message(error: APIError) -> str:
    if isinstance(error, ODataError) and error.error and error.error.message:
        return error.error.message
    return str(error) or type(error).__name__


def print_status(message, level="info"):
    """Simple console output with different levels"""
    if level == "header":
        print(f"\n{message}")
        print("=" * len(message))
    elif level == "section":
        print(f"\n{message}")
    else:
        print(message)


def print_result(result: dict, output_format: str = "text"):
    """Print the per-item status lines of a grant or revoke result."""
    if output_format == "json":
        print(json.dumps(result, indent=2, default=str))
        return

    if result.get("identity"):
        identity = result["identity"]
        print_status(f"Identity: {identity['displayName']} ({identity['id']})")
    if result.get("error"):
        print_status(f"  Error: {result['error']}")
        return

    for item in result.get("items", []):
        prefix = STATUS_PREFIXES.get(item["status"], "[??]")
        print_status(f"  {prefix} {item['message']}")

    if result.get("message"):
        print_status(f"  {result['message']}")

    items = result.get("items", [])
    if items:
        changed = sum(1 for i in items if i["status"] in ("granted", "revoked", "would_grant", "would_revoke"))
        failed = sum(1 for i in items if i["status"] in FAILED_STATUSES)
        skipped = len(items) - changed - failed
        print_status("-" * 60)
        print_status(f"Summary: {changed} changed, {skipped} skipped, {failed} failed")


def format_output(result: dict, output_format: str = "text") -> str:
    """
    Format a listing result (available permissions or current assignments).

    Args:
        result: Dictionary returned by list_permissions or list_assignments
        output_format: Output format ('text', 'json')

    Returns:
        Formatted string output
    """
    if output_format == "json":
        return json.dumps(result, indent=2, default=str)

    lines = []
    if result.get("error"):
        lines.append(f"Error: {result['error']}")
        return "\n".join(lines)

    if "permissions" in result:
        app = result["application"]
        lines.append(f"Available application permissions for {app['displayName']} "
                     f"({len(result['permissions'])} found):")
        lines.append("-" * 60)
        for perm in result["permissions"]:
            lines.append(f"  {perm.get('name') or 'N/A'}")
            if perm.get("description"):
                # Truncate long descriptions
                desc = perm["description"][:100] + "..." if len(perm["description"]) > 100 else perm["description"]
                lines.append(f"      {desc}")
        return "\n".join(lines)

    identity = result["identity"]
    lines.append("=" * 60)
    lines.append(f"APPLICATION PERMISSIONS OF {identity['displayName']}")
    lines.append(f"Object ID: {identity['id']}")
    lines.append(f"Generated: {datetime.now().isoformat()}")
    lines.append("=" * 60)

    assignments = result.get("assignments", [])
    if not assignments:
        lines.append("  (No application permissions assigned)")
        return "\n".join(lines)

    by_resource = {}
    for assignment in assignments:
        resource = assignment.get("resourceDisplayName") or assignment.get("resourceId") or "Unknown API"
        by_resource.setdefault(resource, []).append(assignment)

    for resource, resource_assignments in sorted(by_resource.items()):
        lines.append(f"\n{resource}")
        for assignment in resource_assignments:
            lines.append(f"  +-- {assignment['permission']}")
            lines.append(f"      Assignment ID: {assignment['id']}")

    return "\n".join(lines)


def identity_selector(args) -> tuple:
    """Return (identity_id, identity_name) from the parsed command line."""
    if args.identity_id:
        return args.identity_id, None
    if args.identity_name:
        return None, args.identity_name
    if args.identity:
        if is_guid(args.identity):
            return args.identity, None
        return None, args.identity
    return None, None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Grant and revoke application permissions (app roles) for managed identities",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Grant Microsoft Graph permissions to a managed identity
    python managedIdentityPermissions.py --grant-permission --identity my-func-app --app "Microsoft Graph" --permission Sites.Read.All --permission User.Read.All

    # Revoke a single permission, selecting the identity by object ID
    python managedIdentityPermissions.py --revoke-permission --identity-id <object-id> --app microsoft-graph --permission Sites.Read.All

    # Revoke every application permission the identity holds
    python managedIdentityPermissions.py --revoke-permission --identity my-func-app --all

    # List available permissions for Microsoft Graph
    python managedIdentityPermissions.py --list-permissions --app microsoft-graph

    # List the permissions an identity currently holds
    python managedIdentityPermissions.py --list-assignments --identity my-func-app
        """,
    )

    actions = parser.add_mutually_exclusive_group(required=True)
    actions.add_argument(
        "--grant-permission",
        action="store_true",
        help="Grant application permissions to a managed identity. Requires an identity, --app and --permission.",
    )
    actions.add_argument(
        "--revoke-permission",
        action="store_true",
        help="Revoke application permissions from a managed identity. "
             "Requires an identity and either --all or --app with --permission.",
    )
    actions.add_argument(
        "--list-permissions",
        action="store_true",
        help="List the application permissions exposed by --app.",
    )
    actions.add_argument(
        "--list-assignments",
        action="store_true",
        help="List the application permissions the identity currently holds.",
    )

    identity = parser.add_mutually_exclusive_group()
    identity.add_argument(
        "--identity",
        metavar="ID_OR_NAME",
        help="The managed identity: an object ID (GUID) or a unique display name.",
    )
    identity.add_argument(
        "--identity-id",
        metavar="OBJECT_ID",
        help="The object ID of the managed identity's service principal.",
    )
    identity.add_argument(
        "--identity-name",
        metavar="DISPLAY_NAME",
        help="The display name of the managed identity. Must match exactly one service principal.",
    )

    parser.add_argument(
        "--app",
        metavar="APP_NAME",
        help="Display name of the target application. Well-known aliases ('microsoft-graph', 'sharepoint', ...) "
             "and App ID GUIDs are accepted too.",
    )
    parser.add_argument(
        "--permission",
        action="append",
        metavar="PERMISSION",
        help="The permission (app role value) to grant or revoke, e.g. 'Sites.Read.All'. "
             "Can be specified multiple times.",
    )
    parser.add_argument(
        "--all",
        action="store_true",
        dest="remove_all",
        help="With --revoke-permission: revoke every application permission held by the identity.",
    )

    parser.add_argument(
        "--config", "-c",
        metavar="FILE",
        help="YAML configuration file (TENANT_ID, INTERACTIVE, GRAPH_ENDPOINT, TIMEOUT, DRY_RUN).",
    )
    parser.add_argument(
        "--tenant-id",
        metavar="TENANT_ID",
        help="Tenant to authenticate against. Overrides TENANT_ID from the config file.",
    )
    parser.add_argument(
        "--interactive", "-i",
        action="store_true",
        help="Use interactive browser authentication",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report what would be granted or revoked without changing anything.",
    )
    parser.add_argument(
        "--output", "-o",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    return parser


def validate_args(args) -> str:
    """Return an error message for an incomplete command line, or None."""
    identity_id, identity_name = identity_selector(args)
    has_identity = bool(identity_id or identity_name)

    if args.grant_permission:
        if not has_identity or not args.app or not args.permission:
            return ("--grant-permission requires an identity, --app, and --permission.\n"
                    "Example: --grant-permission --identity <name-or-id> --app microsoft-graph --permission Sites.Read.All")
    elif args.revoke_permission:
        if not has_identity:
            return ("--revoke-permission requires an identity.\n"
                    "Example: --revoke-permission --identity <name-or-id> --app microsoft-graph --permission Sites.Read.All")
        if args.remove_all and (args.app or args.permission):
            return "--all cannot be combined with --app or --permission."
        if not args.remove_all and not args.app:
            return ("--revoke-permission requires either --all or --app with --permission.\n"
                    "Example: --revoke-permission --identity <name-or-id> --all")
    elif args.list_permissions:
        if not args.app:
            return ("--list-permissions requires --app.\n"
                    "Example: --list-permissions --app microsoft-graph")
    elif args.list_assignments:
        if not has_identity:
            return ("--list-assignments requires an identity.\n"
                    "Example: --list-assignments --identity <name-or-id>")
    return None


async def main(argv: list = None) -> dict:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    error = validate_args(args)
    if error:
        print(f"Error: {error}")
        return {"success": False, "error": error}

    config = build_config(args, args.config)

    print_status("Managed Identity Permission Manager", "header")
    if config.dry_run:
        print_status("Dry run: no changes will be made")
    print_status("Authenticating with Azure...")

    identity_id, identity_name = identity_selector(args)

    try:
        credential = build_credential(config)
        manager = ManagedIdentityPermissionManager(GraphDirectory(credential, config), config)

        if args.list_permissions:
            print_status(f"Fetching available permissions for '{args.app}'...", "section")
            result = await manager.list_permissions(args.app)
            print(format_output(result, args.output))
            return result

        if args.list_assignments:
            print_status("Fetching current application permissions...", "section")
            result = await manager.list_assignments(identity_id=identity_id, identity_name=identity_name)
            print(format_output(result, args.output))
            return result

        if args.grant_permission:
            permissions = unique_names(args.permission)
            print_status(f"Granting {len(permissions)} permission(s) of '{args.app}' to "
                         f"'{identity_id or identity_name}'...", "section")
            result = await manager.grant_permissions(
                application=args.app,
                permissions=permissions,
                identity_id=identity_id,
                identity_name=identity_name,
            )
            print_result(result, args.output)
            return result

        if args.remove_all:
            print_status(f"Revoking all application permissions from '{identity_id or identity_name}'...", "section")
        else:
            print_status(f"Revoking permission(s) of '{args.app}' from '{identity_id or identity_name}'...", "section")
        result = await manager.revoke_permissions(
            application=args.app,
            permissions=args.permission or [],
            identity_id=identity_id,
            identity_name=identity_name,
            remove_all=args.remove_all,
        )
        print_result(result, args.output)
        return result

    except (APIError, httpx.HTTPError) as e:
        print(f"\nError: {odata_message(e) if isinstance(e, APIError) else e}")
        print("\nTroubleshooting tips:")
        print("  1. Ensure you're logged in with: az login")
        print("  2. Verify you have the required permissions:")
        print("     - Application.Read.All or Directory.Read.All")
        print("     - For granting or revoking permissions: AppRoleAssignment.ReadWrite.All")
        print("  3. Try using --interactive flag for browser authentication")
        raise


def run():
    """Synchronous entry point for the console script."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
