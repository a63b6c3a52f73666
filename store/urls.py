from django.urls import path

from . import views

app_name = 'store'

urlpatterns = [
    path('settings/', views.StoreSettingsView.as_view(), name='settings'),
]
