"""
URL routes for the onboarding wizard and company website verification
"""

from django.urls import path
from . import views

urlpatterns = [
    path('onboarding/status/', views.OnboardingStatusView.as_view(), name='onboarding_status'),
    path('onboarding/creator/<str:step>/', views.CreatorOnboardingView.as_view(), name='onboarding_creator'),
    path('onboarding/company/<str:step>/', views.CompanyOnboardingView.as_view(), name='onboarding_company'),
    path('company/website-verification/', views.WebsiteVerificationView.as_view(), name='website_verification'),
]
