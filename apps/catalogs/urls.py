from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'catalogs'

router = DefaultRouter()
router.register(r'generals', views.GeneralViewSet, basename='general')
router.register(r'concepts', views.ConceptViewSet, basename='concept')
router.register(r'subconcepts', views.SubconceptViewSet, basename='subconcept')
router.register(r'descriptions', views.DescriptionViewSet, basename='description')
router.register(r'providers', views.ProviderViewSet, basename='provider')

urlpatterns = [
    # GET/POST          /api/catalogs/{generals,concepts,subconcepts,descriptions,providers}/
    # GET/PUT/PATCH     /api/catalogs/<kind>/{id}/
    # DELETE            /api/catalogs/<kind>/{id}/ - delete or deactivate
    # POST              /api/catalogs/providers/import/ - provider CSV
    path('import/', views.import_csv, name='import-csv'),

    path('', include(router.urls)),
]
