"""
Retainer Views

Company contract management, creator browsing and applications, and
the deliverable review loop.
"""

from rest_framework import generics, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import NotFoundError
from core.permissions import IsApprovedCompany, IsCompany, IsCreator
from payments.serializers import RetainerPaymentSerializer
from users.repositories import company_profile_repo
from .models import RetainerContract
from .repositories import retainer_contract_repo, retainer_application_repo, retainer_deliverable_repo
from .serializers import (
    RetainerContractSerializer,
    RetainerContractWriteSerializer,
    RetainerApplicationSerializer,
    RetainerDeliverableSerializer,
    DeliverableResubmitSerializer,
    ReviewNotesSerializer,
    ContractStatusSerializer,
)
from .services import RetainerService


def _can_view(user, contract: RetainerContract) -> bool:
    if user.is_admin or contract.company.user_id == user.id:
        return True
    return contract.status == RetainerContract.Status.OPEN or contract.assigned_creator_id == user.id


# ---------------------------------------------------------------------------
# Creator
# ---------------------------------------------------------------------------

class RetainerBrowseView(generics.ListAPIView):
    """GET /api/v1/retainers/: open contracts plus my assigned ones."""
    serializer_class = RetainerContractSerializer
    permission_classes = [IsCreator]

    def get_queryset(self):
        return retainer_contract_repo.browse_for_creator(self.request.user)


@api_view(["GET"])
def retainer_detail(request, pk):
    contract = retainer_contract_repo.get_by_id(pk)
    if not _can_view(request.user, contract):
        raise NotFoundError("Retainer contract not found", resource="retainer_contract")
    data = RetainerContractSerializer(contract).data
    if request.user.is_creator:
        mine = contract.applications.filter(creator=request.user).order_by("-created_at").first()
        data["my_application_status"] = mine.status if mine else None
    return Response(data)


@api_view(["POST"])
@permission_classes([IsCreator])
def apply_to_retainer(request, pk):
    contract = retainer_contract_repo.get_by_id(pk)
    serializer = RetainerApplicationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    application = RetainerService.apply(request.user, contract, dict(serializer.validated_data))
    return Response(RetainerApplicationSerializer(application).data, status=status.HTTP_201_CREATED)


@api_view(["GET"])
@permission_classes([IsCreator])
def my_retainer_applications(request):
    applications = retainer_application_repo.for_creator(request.user)
    return Response(RetainerApplicationSerializer(applications, many=True).data)


class DeliverableListCreateView(APIView):
    """
    GET  /api/v1/retainers/<id>/deliverables/?month=
    POST /api/v1/retainers/<id>/deliverables/   (assigned creator)
    """

    def get(self, request, pk):
        contract = retainer_contract_repo.get_by_id(pk)
        user = request.user
        if not (user.is_admin or contract.company.user_id == user.id or contract.assigned_creator_id == user.id):
            raise NotFoundError("Retainer contract not found", resource="retainer_contract")
        deliverables = retainer_deliverable_repo.for_contract(contract, request.query_params.get("month"))
        return Response(RetainerDeliverableSerializer(deliverables, many=True).data)

    def post(self, request, pk):
        contract = retainer_contract_repo.get_by_id(pk)
        serializer = RetainerDeliverableSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        deliverable = RetainerService.submit_deliverable(contract, request.user, dict(serializer.validated_data))
        return Response(RetainerDeliverableSerializer(deliverable).data, status=status.HTTP_201_CREATED)


@api_view(["POST"])
@permission_classes([IsCreator])
def resubmit_deliverable(request, pk):
    serializer = DeliverableResubmitSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    deliverable = RetainerService.resubmit_deliverable(
        retainer_deliverable_repo.get_by_id(pk), request.user, dict(serializer.validated_data),
    )
    return Response(RetainerDeliverableSerializer(deliverable).data)


# ---------------------------------------------------------------------------
# Company
# ---------------------------------------------------------------------------

class CompanyRetainerListCreateView(APIView):
    """
    GET  /api/v1/company/retainers/?status=
    POST /api/v1/company/retainers/
    """
    permission_classes = [IsCompany]

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsApprovedCompany()]
        return super().get_permissions()

    def get(self, request):
        company = company_profile_repo.get_for_user(request.user)
        contracts = retainer_contract_repo.for_company(company, request.query_params.get("status"))
        return Response(RetainerContractSerializer(contracts, many=True).data)

    def post(self, request):
        company = company_profile_repo.get_for_user(request.user)
        serializer = RetainerContractWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        contract = RetainerService.create_contract(company, serializer.validated_data)
        return Response(RetainerContractSerializer(contract).data, status=status.HTTP_201_CREATED)


class CompanyRetainerDetailView(APIView):
    """
    GET    /api/v1/company/retainers/<id>/
    PATCH  /api/v1/company/retainers/<id>/
    DELETE /api/v1/company/retainers/<id>/
    """
    permission_classes = [IsCompany]

    def _get_contract(self, request, pk):
        contract = retainer_contract_repo.get_by_id(pk)
        RetainerService.ensure_owner(contract.company.user_id, request.user, "You can only manage your own contracts")
        return contract

    def get(self, request, pk):
        return Response(RetainerContractSerializer(self._get_contract(request, pk)).data)

    def patch(self, request, pk):
        contract = self._get_contract(request, pk)
        serializer = RetainerContractWriteSerializer(contract, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        contract = RetainerService.update_contract(contract, request.user, serializer.validated_data)
        return Response(RetainerContractSerializer(contract).data)

    def delete(self, request, pk):
        RetainerService.delete_contract(self._get_contract(request, pk), request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(["PATCH"])
@permission_classes([IsCompany])
def retainer_status(request, pk):
    serializer = ContractStatusSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    contract = RetainerService.change_status(
        retainer_contract_repo.get_by_id(pk), request.user, serializer.validated_data["status"],
    )
    return Response(RetainerContractSerializer(contract).data)


@api_view(["GET"])
@permission_classes([IsCompany])
def retainer_applications(request, pk):
    contract = retainer_contract_repo.get_by_id(pk)
    RetainerService.ensure_owner(contract.company.user_id, request.user)
    applications = retainer_application_repo.for_contract(contract)
    return Response(RetainerApplicationSerializer(applications, many=True).data)


@api_view(["POST"])
@permission_classes([IsCompany])
def approve_retainer_application(request, pk):
    application = RetainerService.approve_application(retainer_application_repo.get_by_id(pk), request.user)
    return Response(RetainerApplicationSerializer(application).data)


@api_view(["POST"])
@permission_classes([IsCompany])
def reject_retainer_application(request, pk):
    application = RetainerService.reject_application(retainer_application_repo.get_by_id(pk), request.user)
    return Response(RetainerApplicationSerializer(application).data)


@api_view(["POST"])
@permission_classes([IsCompany])
def approve_deliverable(request, pk):
    serializer = ReviewNotesSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    result = RetainerService.approve_deliverable(
        retainer_deliverable_repo.get_by_id(pk), request.user, serializer.validated_data.get("review_notes", ""),
    )
    return Response({
        "deliverable": RetainerDeliverableSerializer(result["deliverable"]).data,
        "payment": RetainerPaymentSerializer(result["payment"]).data,
    })


@api_view(["POST"])
@permission_classes([IsCompany])
def reject_deliverable(request, pk):
    serializer = ReviewNotesSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    deliverable = RetainerService.reject_deliverable(
        retainer_deliverable_repo.get_by_id(pk), request.user, serializer.validated_data.get("review_notes", ""),
    )
    return Response(RetainerDeliverableSerializer(deliverable).data)


@api_view(["POST"])
@permission_classes([IsCompany])
def request_deliverable_revision(request, pk):
    serializer = ReviewNotesSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    deliverable = RetainerService.request_revision(
        retainer_deliverable_repo.get_by_id(pk), request.user, serializer.validated_data.get("review_notes", ""),
    )
    return Response(RetainerDeliverableSerializer(deliverable).data)
