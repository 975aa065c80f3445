"""
User Views

Authentication, profile, onboarding and website verification endpoints.
"""

from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from core.permissions import IsCompany, IsCreator
from .repositories import creator_profile_repo, company_profile_repo
from .serializers import (
    UserSerializer,
    RegisterSerializer,
    LoginSerializer,
    ChangePasswordSerializer,
    CreatorProfileSerializer,
    CompanyProfileSerializer,
    GoogleAuthSerializer,
    PasswordResetRequestSerializer,
    PasswordResetConfirmSerializer,
    TokenConfirmSerializer,
)
from .services import UserService, OnboardingService, WebsiteVerificationService


def _token_payload(user):
    refresh = RefreshToken.for_user(user)
    return {
        "access": str(refresh.access_token),
        "refresh": str(refresh),
    }


class RegisterView(APIView):
    """
    User registration endpoint.

    POST /api/v1/auth/register/
    """
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        user = UserService.register(
            email=data["email"],
            password=data["password"],
            role=data["role"],
            username=data.get("username", ""),
            first_name=data.get("first_name", ""),
            last_name=data.get("last_name", ""),
        )
        UserService.send_verification_email(user)

        return Response({
            "user": UserSerializer(user).data,
            "tokens": _token_payload(user),
        }, status=status.HTTP_201_CREATED)


class LoginView(APIView):
    """
    User login endpoint.

    POST /api/v1/auth/login/
    """
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = UserService.login(
            email=serializer.validated_data["email"],
            password=serializer.validated_data["password"],
        )

        return Response({
            "user": UserSerializer(user).data,
            "tokens": _token_payload(user),
        })


class GoogleAuthView(APIView):
    """
    Google sign-in.

    GET  /api/v1/auth/google/?redirect_uri=... → authorization URL
    POST /api/v1/auth/google/ {code, redirect_uri, role}
    """
    permission_classes = [AllowAny]

    def get(self, request):
        from .oauth import GoogleOAuth

        redirect_uri = request.query_params.get("redirect_uri") or None
        return Response({"url": GoogleOAuth().get_authorization_url(redirect_uri)})

    def post(self, request):
        serializer = GoogleAuthSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        user_info = UserService.get_google_user_info(data["code"], data.get("redirect_uri") or None)
        user, created = UserService.authenticate_oauth(user_info, role=data["role"])

        return Response({
            "user": UserSerializer(user).data,
            "tokens": _token_payload(user),
            "created": created,
        })


class ProfileView(APIView):
    """
    GET   /api/v1/auth/profile/ - Current user with role profile
    PATCH /api/v1/auth/profile/ - Update account and role profile fields
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(UserSerializer(request.user).data)

    def patch(self, request):
        user_serializer = UserSerializer(request.user, data=request.data, partial=True)
        user_serializer.is_valid(raise_exception=True)
        user_serializer.save()

        profile_data = request.data.get("profile")
        if isinstance(profile_data, dict):
            if request.user.is_creator:
                profile = creator_profile_repo.get_for_user(request.user)
                serializer = CreatorProfileSerializer(profile, data=profile_data, partial=True)
            elif request.user.is_company:
                profile = company_profile_repo.get_for_user(request.user)
                serializer = CompanyProfileSerializer(profile, data=profile_data, partial=True)
            else:
                serializer = None
            if serializer is not None:
                serializer.is_valid(raise_exception=True)
                serializer.save()

        request.user.refresh_from_db()
        return Response(UserSerializer(request.user).data)


class ChangePasswordView(APIView):
    """
    Change password endpoint.

    POST /api/v1/auth/change-password/
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = ChangePasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        UserService.change_password(
            request.user,
            serializer.validated_data.get("old_password", ""),
            serializer.validated_data["new_password"],
        )
        return Response({"message": "Password changed successfully"})


class LogoutView(APIView):
    """
    Logout endpoint - blacklists refresh token.

    POST /api/v1/auth/logout/
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        refresh_token = request.data.get("refresh")
        if refresh_token:
            try:
                RefreshToken(refresh_token).blacklist()
            except TokenError:
                return Response({"message": "Logged out"})
        return Response({"message": "Logged out successfully"})


class VerifyEmailView(APIView):
    """
    POST /api/v1/auth/verify-email/ {uid, token}
    """
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = TokenConfirmSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        UserService.verify_email(**serializer.validated_data)
        return Response({"message": "Email verified"})


class ResendVerificationView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        if request.user.email_verified:
            return Response({"message": "Email already verified"})
        UserService.send_verification_email(request.user)
        return Response({"message": "Verification email sent"})


class PasswordResetRequestView(APIView):
    """
    POST /api/v1/auth/password-reset/ {email}
    """
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = PasswordResetRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        UserService.request_password_reset(serializer.validated_data["email"])
        return Response({"message": "If that email exists, a reset link has been sent"})


class PasswordResetConfirmView(APIView):
    """
    POST /api/v1/auth/password-reset/confirm/ {uid, token, new_password}
    """
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = PasswordResetConfirmSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        UserService.reset_password(**serializer.validated_data)
        return Response({"message": "Password has been reset"})


# ---------------------------------------------------------------------------
# Onboarding wizard
# ---------------------------------------------------------------------------

class OnboardingStatusView(APIView):
    """GET /api/v1/onboarding/status/"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(OnboardingService.status(request.user))


class CreatorOnboardingView(APIView):
    """POST /api/v1/onboarding/creator/<step>/"""
    permission_classes = [IsCreator]

    def post(self, request, step):
        profile = OnboardingService.save_creator_step(request.user, step, request.data)
        return Response({
            "profile": CreatorProfileSerializer(profile).data,
            "status": OnboardingService.status(request.user),
        })


class CompanyOnboardingView(APIView):
    """POST /api/v1/onboarding/company/<step>/"""
    permission_classes = [IsCompany]

    def post(self, request, step):
        profile = OnboardingService.save_company_step(request.user, step, request.data)
        return Response({
            "profile": CompanyProfileSerializer(profile).data,
            "status": OnboardingService.status(request.user),
        })


# ---------------------------------------------------------------------------
# Company website verification
# ---------------------------------------------------------------------------

class WebsiteVerificationView(APIView):
    """
    GET  /api/v1/company/website-verification/ → issue a fresh token
    POST /api/v1/company/website-verification/ {method} → check the site
    """
    permission_classes = [IsCompany]

    def get(self, request):
        return Response(WebsiteVerificationService.request_token(request.user))

    def post(self, request):
        method = request.data.get("method", "meta_tag")
        profile = WebsiteVerificationService.verify(request.user, method)
        return Response(CompanyProfileSerializer(profile).data)
