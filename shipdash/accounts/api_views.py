import logging

from django.db.models import Q
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenObtainPairView

from .models import Client
from .permissions import IsAdmin
from .serializers import ClientSerializer, LoginSerializer, UserSerializer

logger = logging.getLogger(__name__)


class CustomTokenObtainPairView(TokenObtainPairView):
    """JWT token obtain view that also returns the user and their clients."""
    serializer_class = LoginSerializer
    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.validated_data['user']

        refresh = RefreshToken.for_user(user)
        tokens = {
            'refresh': str(refresh),
            'access': str(refresh.access_token),
            'user': UserSerializer(user).data
        }

        logger.info(f"User {user.username} obtained API token")
        return Response(tokens, status=status.HTTP_200_OK)


class ClientViewSet(viewsets.ModelViewSet):
    """
    Clients visible to the caller.

    Admins manage every client; other users only list the clients they belong to.
    """
    serializer_class = ClientSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = None

    def get_queryset(self):
        user = self.request.user
        queryset = Client.objects.all() if user.can_view_all_clients else user.clients.all()

        search = self.request.query_params.get('search', None)
        if search:
            queryset = queryset.filter(
                Q(company_name__icontains=search) |
                Q(short_code__icontains=search)
            )
        return queryset.order_by('company_name')

    def get_permissions(self):
        if self.action in ('create', 'update', 'partial_update', 'destroy'):
            return [IsAdmin()]
        return super().get_permissions()

    @action(detail=False, methods=['get'], permission_classes=[IsAuthenticated])
    def me(self, request):
        """Return the calling user with their client memberships."""
        return Response({
            'success': True,
            'data': UserSerializer(request.user).data
        })
