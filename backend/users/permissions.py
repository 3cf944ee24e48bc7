from rest_framework import permissions


class IsDriver(permissions.BasePermission):
    message = "Only drivers can perform this action."

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.is_driver)


class IsDriverOrSuperAdmin(permissions.BasePermission):
    message = "Only drivers can perform this action."

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and (user.is_driver or user.is_super_role))
