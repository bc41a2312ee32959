from rest_framework import permissions


def is_admin(user):
    return bool(user and user.is_authenticated and user.is_admin_role)


def is_moderator(user):
    return bool(user and user.is_authenticated and user.is_moderator_role)


class IsAdmin(permissions.BasePermission):
    message = 'Admin access required.'

    def has_permission(self, request, view):
        return is_admin(request.user)


class IsModerator(permissions.BasePermission):
    message = 'Moderator access required.'

    def has_permission(self, request, view):
        return is_moderator(request.user)


class IsCustomerOrAdmin(permissions.BasePermission):
    message = 'Insufficient permissions.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and
                    (user.role in user.CUSTOMER_ROLES or user.is_superuser))


class IsOwnerOrAdmin(permissions.BasePermission):
    """Object level. Views name the owner attribute with `owner_field`."""
    message = 'Access denied. You can only modify your own resources.'

    def has_object_permission(self, request, view, obj):
        if is_admin(request.user):
            return True
        owner_id = getattr(obj, getattr(view, 'owner_field', 'created_by') + '_id', None)
        return owner_id is not None and owner_id == request.user.id


class IsAdminOrReadOnly(permissions.BasePermission):
    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return True
        return is_admin(request.user)
