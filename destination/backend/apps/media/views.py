from rest_framework import permissions, serializers
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.parsers import MultiPartParser, FormParser, JSONParser
from django.conf import settings

from apps.core.models import AuditLog
from apps.core.pagination import paginate
from apps.core.permissions import is_admin
from .models import UploadedImage
from .services import (UploadError, folder_for, folder_structure, upload_image, delete_image,
                       transformed_url, ALLOWED_CROPS, ALLOWED_FORMATS)


class UploadedImageSerializer(serializers.ModelSerializer):
    class Meta:
        model = UploadedImage
        fields = ['id', 'user', 'public_id', 'url', 'folder', 'width', 'height', 'format', 'bytes',
                  'created_at']


def _check_file(f):
    if not (getattr(f, 'content_type', '') or '').startswith('image/'):
        return f'{f.name}: only image files are allowed'
    if f.size > settings.UPLOAD_MAX_BYTES:
        return f'{f.name}: file exceeds {settings.UPLOAD_MAX_BYTES // (1024 * 1024)}MB limit'
    return None


def _store(request, f, folder):
    result = upload_image(f, folder, request.user.id)
    UploadedImage.objects.create(user=request.user, folder=folder, **result)
    return result


class UploadView(APIView):
    permission_classes = [permissions.IsAuthenticated]
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request):
        f = request.FILES.get('file') or request.FILES.get('image')
        if not f:
            return Response({'error': 'No file provided'}, status=400)
        error = _check_file(f)
        if error:
            return Response({'error': error}, status=400)
        folder = folder_for(request.data.get('folder', 'general'))
        if folder is None:
            return Response({'error': 'Invalid folder'}, status=400)
        try:
            result = _store(request, f, folder)
        except UploadError as e:
            return Response({'error': 'Image upload failed', 'details': str(e)}, status=502)
        return Response({'message': 'Image uploaded successfully', 'data': result}, status=201)


class MultipleUploadView(APIView):
    permission_classes = [permissions.IsAuthenticated]
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request):
        files = request.FILES.getlist('images')
        if not files:
            return Response({'error': 'No images provided'}, status=400)
        if len(files) > settings.UPLOAD_MAX_FILES:
            return Response({'error': f'At most {settings.UPLOAD_MAX_FILES} images per request'}, status=400)
        errors = [e for e in (_check_file(f) for f in files) if e]
        if errors:
            return Response({'error': 'Invalid files', 'details': errors}, status=400)
        folder = folder_for(request.data.get('folder', 'general'))
        if folder is None:
            return Response({'error': 'Invalid folder'}, status=400)
        uploaded = []
        try:
            for f in files:
                uploaded.append(_store(request, f, folder))
        except UploadError as e:
            return Response({'error': 'Image upload failed', 'details': str(e), 'data': uploaded},
                            status=502)
        return Response({'message': f'{len(uploaded)} images uploaded successfully', 'data': uploaded},
                        status=201)


class DeleteUploadView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def delete(self, request, public_id):
        record = UploadedImage.objects.filter(public_id=public_id).first()
        if not is_admin(request.user) and (record is None or record.user_id != request.user.id):
            return Response({'error': 'Image not found'}, status=404)
        try:
            deleted = delete_image(public_id)
        except UploadError as e:
            return Response({'error': 'Image delete failed', 'details': str(e)}, status=502)
        if record is not None:
            record.delete()
        AuditLog.log(request.user, 'image_deleted', {'public_id': public_id}, request)
        return Response({'message': 'Image deleted' if deleted else 'Image was already removed',
                         'deleted': deleted})


class FoldersView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return Response({'folders': folder_structure()})


class MyUploadsView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        qs = UploadedImage.objects.filter(user=request.user)
        if is_admin(request.user) and request.query_params.get('user_id'):
            if not request.query_params['user_id'].isdigit():
                return Response({'error': 'Invalid user_id'}, status=400)
            qs = UploadedImage.objects.filter(user_id=request.query_params['user_id'])
        if request.query_params.get('folder'):
            folder = folder_for(request.query_params['folder'])
            qs = qs.filter(folder=folder)
        return paginate(self, qs, UploadedImageSerializer)


class TransformView(APIView):
    permission_classes = [permissions.IsAuthenticated]
    parser_classes = [JSONParser, FormParser]

    def post(self, request):
        public_id = request.data.get('public_id')
        if not public_id:
            return Response({'error': 'public_id is required'}, status=400)
        crop = request.data.get('crop', 'fill')
        fmt = request.data.get('format', 'webp')
        if crop not in ALLOWED_CROPS or fmt not in ALLOWED_FORMATS:
            return Response({'error': 'Unsupported crop or format'}, status=400)
        try:
            width = int(request.data['width']) if request.data.get('width') else None
            height = int(request.data['height']) if request.data.get('height') else None
        except (TypeError, ValueError):
            return Response({'error': 'width and height must be integers'}, status=400)
        try:
            url = transformed_url(public_id, width=width, height=height, crop=crop,
                                  quality=request.data.get('quality', 'auto'), fmt=fmt)
        except UploadError as e:
            return Response({'error': str(e)}, status=503)
        return Response({'url': url, 'public_id': public_id})
