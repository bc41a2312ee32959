from rest_framework import serializers
from .models import DataIngestionHistory


class DataIngestionHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = DataIngestionHistory
        fields = '__all__'
