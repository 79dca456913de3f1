from django.urls import path
from .views import shipping_location_list

urlpatterns = [
    path('shipping-locations/', shipping_location_list, name='shipping-location-list'),
]
