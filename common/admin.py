class ReadOnlyAdminMixin:
    """
    Admin mixin for rows that are only ever written by the service layer.
    The rows stay browsable; add, change and delete are disabled.
    """

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
