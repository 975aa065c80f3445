from rest_framework import generics, permissions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.views import APIView

from core.pagination import CreatedCursorPagination
from .repositories import notification_repo, preference_repo
from .serializers import NotificationSerializer, NotificationPreferenceSerializer


class NotificationListView(generics.ListAPIView):
    """
    GET /api/v1/notifications/          → all notifications, newest first
    GET /api/v1/notifications/?unread=1 → unread only
    """
    serializer_class = NotificationSerializer
    permission_classes = [permissions.IsAuthenticated]
    pagination_class = CreatedCursorPagination

    def get_queryset(self):
        unread = self.request.query_params.get("unread") in ("1", "true")
        return notification_repo.for_user(self.request.user, unread_only=unread)


class NotificationDetailView(APIView):
    """
    GET    /api/v1/notifications/<id>/
    DELETE /api/v1/notifications/<id>/
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, pk):
        notification = notification_repo.get_for_user(request.user, pk)
        return Response(NotificationSerializer(notification).data)

    def delete(self, request, pk):
        notification = notification_repo.get_for_user(request.user, pk)
        notification_repo.delete(notification)
        return Response(status=204)


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def unread_count(request):
    return Response({"count": notification_repo.unread_count(request.user)})


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated])
def mark_read(request, pk):
    notification = notification_repo.get_for_user(request.user, pk)
    notification_repo.mark_read(notification)
    return Response(NotificationSerializer(notification).data)


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated])
def mark_all_read(request):
    updated = notification_repo.mark_all_read(request.user)
    return Response({"updated": updated})


@api_view(["DELETE"])
@permission_classes([permissions.IsAuthenticated])
def clear_all(request):
    deleted = notification_repo.clear(request.user)
    return Response({"deleted": deleted})


class NotificationPreferenceView(APIView):
    """
    GET   /api/v1/notifications/preferences/
    PATCH /api/v1/notifications/preferences/
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        prefs = preference_repo.get_for_user(request.user)
        return Response(NotificationPreferenceSerializer(prefs).data)

    def patch(self, request):
        prefs = preference_repo.get_for_user(request.user)
        serializer = NotificationPreferenceSerializer(prefs, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)

    put = patch
