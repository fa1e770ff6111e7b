"""URL Configuration for registrations API."""

from django.urls import path

from . import views

urlpatterns = [
    path('registrations/', views.create_registration, name='registration-create'),
    path('registrations/search/', views.search_registrations, name='registration-search'),
    path('registrations/check-in/', views.check_in, name='registration-check-in'),
    path('registrations/<uuid:registration_id>/cancel/', views.cancel_registration, name='registration-cancel'),
    path('registrations/<str:ticket_id>/qr/', views.ticket_qr, name='registration-qr'),
]
