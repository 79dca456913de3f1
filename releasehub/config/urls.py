"""
URL configuration for the releasehub project.

Every API app is mounted under /api/v1/.
"""
from django.contrib import admin
from django.urls import path, include, re_path
from django.conf import settings
from django.views.static import serve

admin.site.site_header = "EPG Release Admin Panel"
admin.site.site_title = "EPG Release Admin Portal"
admin.site.index_title = "Parts, Releases and Shipping Locations"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('releasehub.core.urls')),
    path('api/v1/', include('releasehub.locations.urls')),
    path('api/v1/', include('releasehub.catalog.urls')),
    path('api/v1/', include('releasehub.inventory.urls')),
    path('api/v1/', include('releasehub.releases.urls')),
    re_path(r'^media/(?P<path>.*)$', serve, {'document_root': settings.MEDIA_ROOT}),
]
