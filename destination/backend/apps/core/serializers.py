from rest_framework import serializers
from django.contrib.auth import authenticate
from .models import User, Notification


class RegisterSerializer(serializers.ModelSerializer):
    name = serializers.CharField(write_only=True, max_length=150)
    password = serializers.CharField(write_only=True, min_length=8)
    phone = serializers.CharField(max_length=20)

    class Meta:
        model = User
        fields = ['name', 'email', 'password', 'phone', 'city']

    def validate_email(self, value):
        value = value.lower().strip()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError('User already exists with this email.')
        return value

    def create(self, validated_data):
        name = validated_data.pop('name').strip()
        first, _, last = name.partition(' ')
        password = validated_data.pop('password')
        user = User(username=validated_data['email'], first_name=first, last_name=last.strip(),
                    role=User.ROLE_CUSTOMER, **validated_data)
        user.set_password(password)
        user.save()
        return user


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField()
    remember_me = serializers.BooleanField(required=False, default=False)

    def validate(self, data):
        user = authenticate(username=data['email'].lower().strip(), password=data['password'])
        if not user:
            raise serializers.ValidationError('Invalid credentials.')
        data['user'] = user
        return data


class UserSerializer(serializers.ModelSerializer):
    name = serializers.CharField(source='display_name', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'email', 'name', 'first_name', 'last_name', 'phone', 'role', 'status',
                  'city', 'business_name', 'business_type', 'email_verified', 'preferences',
                  'last_login', 'created_at']
        read_only_fields = ['id', 'email', 'role', 'status', 'email_verified',
                            'last_login', 'created_at']


class AdminUserSerializer(serializers.ModelSerializer):
    name = serializers.CharField(source='display_name', read_only=True)
    password = serializers.CharField(write_only=True, min_length=8, required=False)

    class Meta:
        model = User
        fields = ['id', 'email', 'name', 'first_name', 'last_name', 'phone', 'role', 'status',
                  'city', 'business_name', 'business_type', 'email_verified', 'password',
                  'last_login', 'created_at']
        read_only_fields = ['id', 'last_login', 'created_at']

    def validate_email(self, value):
        value = value.lower().strip()
        qs = User.objects.filter(email__iexact=value)
        if self.instance:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError('User already exists with this email.')
        return value

    def validate(self, data):
        if not self.instance and not data.get('password'):
            raise serializers.ValidationError({'password': 'This field is required.'})
        return data

    def create(self, validated_data):
        password = validated_data.pop('password')
        user = User(username=validated_data['email'], **validated_data)
        user.set_password(password)
        user.save()
        return user

    def update(self, instance, validated_data):
        password = validated_data.pop('password', None)
        instance = super().update(instance, validated_data)
        if password:
            instance.set_password(password)
            instance.save(update_fields=['password'])
        return instance


class NotificationSerializer(serializers.ModelSerializer):
    type = serializers.CharField(source='notif_type', read_only=True)

    class Meta:
        model = Notification
        fields = ['id', 'title', 'message', 'type', 'link', 'is_read', 'created_at']
