"""URL routes for tierlists app."""

from django.urls import path

from server.apps.tierlists import views

app_name = 'tierlists'

urlpatterns = [
    path('images/<str:key>', views.get_image, name='image'),
    path('tierlist', views.create_tierlist_view, name='create'),
    path(
        'tierlist/<str:tierlist_uuid>',
        views.get_tierlist_view,
        name='detail',
    ),
    path(
        'tierlist/<str:tierlist_uuid>/upload',
        views.upload_image_view,
        name='upload',
    ),
    path(
        'tierlist/<str:tierlist_uuid>/move',
        views.move_entry_view,
        name='move',
    ),
]
