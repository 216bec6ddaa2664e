from django.contrib.auth import authenticate
from rest_framework import serializers

from .models import Client, User


class ClientSerializer(serializers.ModelSerializer):
    class Meta:
        model = Client
        fields = [
            'id', 'company_name', 'short_code', 'next_invoice_number',
            'billing_email', 'is_active', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'next_invoice_number', 'created_at', 'updated_at']


class ClientSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Client
        fields = ['id', 'company_name', 'short_code']


class UserSerializer(serializers.ModelSerializer):
    clients = ClientSummarySerializer(many=True, read_only=True)
    can_view_all_clients = serializers.BooleanField(read_only=True)

    class Meta:
        model = User
        fields = [
            'id', 'username', 'email', 'first_name', 'last_name',
            'role', 'clients', 'can_view_all_clients'
        ]
        read_only_fields = ['id', 'role']


class LoginSerializer(serializers.Serializer):
    """Serializer for user login."""
    username = serializers.CharField()
    password = serializers.CharField(write_only=True)

    def validate(self, data):
        username = data.get('username')
        password = data.get('password')

        if username and password:
            user = authenticate(username=username, password=password)
            if user:
                if user.is_active:
                    data['user'] = user
                else:
                    raise serializers.ValidationError('User account is disabled.')
            else:
                raise serializers.ValidationError('Unable to log in with provided credentials.')
        else:
            raise serializers.ValidationError('Must include username and password.')

        return data
