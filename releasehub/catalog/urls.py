from django.urls import path
from .views import part_list_update

urlpatterns = [
    path('parts/', part_list_update, name='part-list-update'),
]
