from rest_framework import generics
from rest_framework.views import APIView
from rest_framework.response import Response
from django.db.models import Count, Sum, Avg

from apps.core.models import AuditLog
from apps.core.pagination import paginate
from apps.core.permissions import IsAdmin
from .models import DataIngestionHistory
from .pipeline import run_ingestion, clear_ingested, normalize_types
from .serializers import DataIngestionHistorySerializer


class IngestionRunView(APIView):
    permission_classes = [IsAdmin]

    def post(self, request):
        try:
            types = normalize_types(request.data.get('types'))
        except ValueError as e:
            return Response({'error': str(e)}, status=400)
        if request.data.get('clear'):
            deleted = clear_ingested(types, initiated_by=request.user)
            AuditLog.log(request.user, 'ingested_data_cleared', {'deleted': deleted}, request)
            return Response({'message': 'Ingested listings removed', 'deleted': deleted})
        results = run_ingestion(types, initiated_by=request.user)
        AuditLog.log(request.user, 'data_ingestion_run',
                     {'types': types, 'statuses': {r['data_type']: r['status'] for r in results}},
                     request)
        failed = all(r['status'] == 'failed' for r in results)
        return Response({'message': 'Ingestion failed' if failed else 'Ingestion completed',
                         'results': results}, status=502 if failed else 200)


class IngestionHistoryListView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request):
        qs = DataIngestionHistory.objects.all()
        for field in ('data_type', 'operation', 'status'):
            if request.query_params.get(field):
                qs = qs.filter(**{field: request.query_params[field]})
        return paginate(self, qs, DataIngestionHistorySerializer)


class IngestionHistoryDetailView(generics.RetrieveDestroyAPIView):
    queryset = DataIngestionHistory.objects.all()
    serializer_class = DataIngestionHistorySerializer
    permission_classes = [IsAdmin]


class IngestionStatsView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request):
        qs = DataIngestionHistory.objects.all()
        totals = qs.aggregate(
            runs=Count('id'), processed=Sum('records_processed'),
            successful=Sum('records_successful'), failed=Sum('records_failed'),
            avg_duration_ms=Avg('duration_ms'),
        )
        by_type = list(qs.values('data_type').annotate(
            runs=Count('id'), successful=Sum('records_successful'), failed=Sum('records_failed'),
        ).order_by('data_type'))
        by_status = dict(qs.values_list('status').annotate(n=Count('id')).order_by())
        latest = qs.first()
        return Response({
            'totals': {k: v or 0 for k, v in totals.items()},
            'by_type': by_type,
            'by_status': by_status,
            'last_run': DataIngestionHistorySerializer(latest).data if latest else None,
        })
