"""Main API URL router for /api/v1/."""
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from targets import target_views as target_api_views

app_name = 'api'

router = DefaultRouter()
router.register(r'targets', target_api_views.TargetViewSet, basename='target')

urlpatterns = [
    # Attainment (declared before the router so "attainment" is not read as a target id)
    path('targets/attainment/', target_api_views.AttainmentReportView.as_view(), name='target-attainment'),
    path('targets/attainment/export/', target_api_views.AttainmentExportView.as_view(), name='target-attainment-export'),
    path('targets/attainment/async/', target_api_views.AsyncAttainmentReportView.as_view(), name='target-attainment-async'),
    path('company-targets/attainment/', target_api_views.CompanyAttainmentView.as_view(), name='company-target-attainment'),

    path('', include(router.urls)),
]
