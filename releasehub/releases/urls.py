from django.urls import path
from .views import (
    release_list_create, release_detail, release_documents,
    release_download, customer_packing_slip, cron_send_invoices,
)

urlpatterns = [
    path('releases/', release_list_create, name='release-list-create'),
    path('releases/<int:release_id>/', release_detail, name='release-detail'),
    path('releases/<int:release_id>/documents/', release_documents, name='release-documents'),
    path('releases/<int:release_id>/download/<str:doc_type>/', release_download, name='release-download'),
    path('releases/<int:release_id>/customer-packing-slip/', customer_packing_slip, name='release-customer-packing-slip'),
    path('cron/send-invoices/', cron_send_invoices, name='cron-send-invoices'),
]
