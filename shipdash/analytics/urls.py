from django.urls import path

from . import views

urlpatterns = [
    path('<str:report>/', views.analytics_report, name='analytics-report'),
]
