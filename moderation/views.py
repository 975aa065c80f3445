"""
Moderation Views

Admin-only keyword management and the flagged-content queue. Every
change is written to the audit log.
"""

from rest_framework import generics, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.views import APIView

from administration.services import AuditService
from core.pagination import StandardPagination
from core.permissions import IsAdmin
from .repositories import banned_keyword_repo, content_flag_repo
from .serializers import BannedKeywordSerializer, ContentFlagSerializer, FlagReviewSerializer
from .services import ModerationService


class KeywordListCreateView(APIView):
    """
    GET  /api/v1/admin/moderation/keywords/
    POST /api/v1/admin/moderation/keywords/
    """

    permission_classes = [IsAdmin]

    def get(self, request):
        banned_keyword_repo.seed_defaults()
        keywords = banned_keyword_repo.get_all()
        return Response(BannedKeywordSerializer(keywords, many=True).data)

    def post(self, request):
        serializer = BannedKeywordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        keyword = serializer.save(created_by=request.user)
        AuditService.log(
            request.user, "create_keyword", "banned_keyword", keyword.pk,
            changes=serializer.data, request=request,
        )
        return Response(BannedKeywordSerializer(keyword).data, status=status.HTTP_201_CREATED)


class KeywordDetailView(APIView):
    """PATCH / DELETE /api/v1/admin/moderation/keywords/<id>/"""

    permission_classes = [IsAdmin]

    def patch(self, request, pk):
        keyword = banned_keyword_repo.get_by_id(pk)
        serializer = BannedKeywordSerializer(keyword, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        keyword = serializer.save()
        AuditService.log(
            request.user, "update_keyword", "banned_keyword", keyword.pk,
            changes=dict(serializer.validated_data), request=request,
        )
        return Response(BannedKeywordSerializer(keyword).data)

    def delete(self, request, pk):
        keyword = banned_keyword_repo.get_by_id(pk)
        AuditService.log(
            request.user, "delete_keyword", "banned_keyword", keyword.pk,
            changes={"keyword": keyword.keyword}, request=request,
        )
        banned_keyword_repo.delete(keyword)
        return Response(status=status.HTTP_204_NO_CONTENT)


class FlagListView(generics.ListAPIView):
    """GET /api/v1/admin/moderation/flags/?status=pending&content_type=message"""

    permission_classes = [IsAdmin]
    serializer_class = ContentFlagSerializer
    pagination_class = StandardPagination

    def get_queryset(self):
        return content_flag_repo.by_status(
            self.request.query_params.get("status"),
            self.request.query_params.get("content_type"),
        )


@api_view(["POST"])
@permission_classes([IsAdmin])
def review_flag(request, pk):
    serializer = FlagReviewSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    flag = ModerationService.review_flag(
        content_flag_repo.get_by_id(pk),
        request.user,
        serializer.validated_data["status"],
        serializer.validated_data.get("admin_notes", ""),
        serializer.validated_data.get("action_taken", ""),
    )
    AuditService.log(
        request.user, "review_flag", "content_flag", flag.pk,
        changes={"status": flag.status, "action_taken": flag.action_taken},
        reason=flag.admin_notes, request=request,
    )
    return Response(ContentFlagSerializer(flag).data)
