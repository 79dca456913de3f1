from django.urls import path
from .views import production_list_create

urlpatterns = [
    path('production/', production_list_create, name='production-list-create'),
]
