from rest_framework import permissions


class IsAdmin(permissions.BasePermission):
    def has_permission(self, request, view):
        return request.user and request.user.is_authenticated and request.user.is_admin


class IsAdminOrCare(permissions.BasePermission):
    def has_permission(self, request, view):
        return request.user and request.user.is_authenticated and (
            request.user.is_admin or request.user.is_care
        )


class IsClientMember(permissions.BasePermission):
    """
    Object-level check for records owned by a client.

    Admin and care users pass; client users must belong to the record's client.
    """

    def has_permission(self, request, view):
        return request.user and request.user.is_authenticated

    def has_object_permission(self, request, view, obj):
        client_id = getattr(obj, 'client_id', None)
        if client_id is None:
            return request.user.can_view_all_clients
        return request.user.is_member_of(client_id)
