import re
import time
from urllib.parse import urlparse

from django.conf import settings
import cloudinary
import cloudinary.uploader
import cloudinary.utils
from cloudinary.exceptions import Error as CloudinaryError
import structlog

logger = structlog.get_logger(__name__)

FOLDERS = ['general', 'hotels', 'restaurants', 'attractions', 'events', 'sports', 'travel',
           'profiles', 'reviews', 'promotions']

ALLOWED_CROPS = {'fill', 'fit', 'limit', 'scale', 'thumb', 'pad', 'crop'}
ALLOWED_FORMATS = {'webp', 'jpg', 'png', 'avif', 'auto'}


class UploadError(Exception):
    pass


def configure():
    if not settings.CLOUDINARY_CLOUD_NAME:
        raise UploadError('Image storage is not configured')
    cloudinary.config(
        cloud_name=settings.CLOUDINARY_CLOUD_NAME,
        api_key=settings.CLOUDINARY_API_KEY,
        api_secret=settings.CLOUDINARY_API_SECRET,
        secure=True,
    )


def folder_structure():
    base = settings.CLOUDINARY_BASE_FOLDER
    return {name: f'{base}/{name}' for name in FOLDERS}


def folder_for(kind):
    """Full folder path for a folder name, accepting bare or base-prefixed names."""
    base = settings.CLOUDINARY_BASE_FOLDER
    kind = str(kind or 'general').strip('/')
    if kind.startswith(base + '/'):
        kind = kind[len(base) + 1:]
    if kind not in FOLDERS:
        return None
    return f'{base}/{kind}'


SKIPPED_SEGMENT_RE = re.compile(r'^(v\d+|[a-z]{1,3}_[^,]+(,[a-z]{1,3}_[^,]+)*)$')


def folder_from_url(url):
    """Folder name of a Cloudinary delivery URL, or 'general' when it is not one of ours."""
    parts = [p for p in urlparse(str(url or '')).path.split('/') if p]
    if 'upload' not in parts:
        return 'general'
    parts = parts[parts.index('upload') + 1:]
    while parts and SKIPPED_SEGMENT_RE.match(parts[0]):
        parts = parts[1:]
    if len(parts) < 2 or parts[-2] not in FOLDERS:
        return 'general'
    return parts[-2]


def upload_image(file_obj, folder, user_id):
    configure()
    public_id = f'{user_id}_{int(time.time() * 1000)}'
    try:
        result = cloudinary.uploader.upload(
            file_obj,
            folder=folder,
            public_id=public_id,
            resource_type='image',
            format='webp',
            quality='auto',
            overwrite=False,
        )
    except CloudinaryError as e:
        logger.error('image upload failed', folder=folder, user_id=user_id, error=str(e))
        raise UploadError(str(e))
    logger.info('image uploaded', public_id=result.get('public_id'), folder=folder, bytes=result.get('bytes'))
    return {
        'url': result['secure_url'],
        'public_id': result['public_id'],
        'width': result.get('width'),
        'height': result.get('height'),
        'format': result.get('format'),
        'bytes': result.get('bytes'),
    }


def delete_image(public_id):
    configure()
    try:
        result = cloudinary.uploader.destroy(public_id, invalidate=True)
    except CloudinaryError as e:
        logger.error('image delete failed', public_id=public_id, error=str(e))
        raise UploadError(str(e))
    return result.get('result') == 'ok'


def transformed_url(public_id, width=None, height=None, crop='fill', quality='auto', fmt='webp'):
    configure()
    options = {'secure': True, 'quality': quality, 'fetch_format': fmt}
    if width:
        options['width'] = int(width)
    if height:
        options['height'] = int(height)
    if width or height:
        options['crop'] = crop
    url, _ = cloudinary.utils.cloudinary_url(public_id, **options)
    return url
