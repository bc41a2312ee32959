from rest_framework import serializers
from .models import Review
from apps.listings.registry import find_listing


class ReviewSerializer(serializers.ModelSerializer):
    author = serializers.SerializerMethodField()
    has_voted = serializers.SerializerMethodField()

    class Meta:
        model = Review
        fields = ['id', 'user', 'author', 'entity_type', 'entity_id', 'rating', 'title', 'comment',
                  'images', 'helpful_count', 'has_voted', 'verified', 'status', 'moderation_notes',
                  'moderated_at', 'is_edited', 'last_edited_at', 'visit_date', 'created_at',
                  'updated_at']
        read_only_fields = ['id', 'user', 'helpful_count', 'verified', 'status', 'moderation_notes',
                            'moderated_at', 'is_edited', 'last_edited_at', 'created_at', 'updated_at']
        validators = []

    def get_author(self, obj):
        return obj.author_display

    def get_has_voted(self, obj):
        request = self.context.get('request')
        if not request or not request.user.is_authenticated:
            return False
        return obj.helpful_votes.filter(user=request.user, helpful=True).exists()

    def validate_title(self, value):
        return value.strip()

    def validate_comment(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Comment is required.')
        if len(value) > 2000:
            raise serializers.ValidationError('Comment cannot exceed 2000 characters.')
        return value

    def validate(self, data):
        if self.instance is None:
            request = self.context['request']
            if find_listing(data['entity_type'], data['entity_id']) is None:
                raise serializers.ValidationError({'entity_id': 'Item not found.'})
            if Review.objects.filter(user=request.user, entity_type=data['entity_type'],
                                     entity_id=data['entity_id']).exists():
                raise serializers.ValidationError('You have already reviewed this item.')
        return data


class ReviewUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = Review
        fields = ['rating', 'title', 'comment', 'images', 'visit_date']
