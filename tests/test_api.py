"""
API Endpoint Tests
"""
import base64
import json
import os
import pytest

from app import create_app


@pytest.fixture
def upload(multipart, content_type):
    """Post a single file part"""
    def _upload(client, filename, content, declared=None, path='/extract'):
        body = multipart([("file", filename, declared, content)])
        return client.post(path, data=body, content_type=content_type)
    return _upload


class TestHealthEndpoints:
    """Test health check endpoints"""

    def test_healthz(self, client):
        """Health check should return ok"""
        response = client.get('/healthz')
        assert response.status_code == 200

        data = json.loads(response.data)
        assert data['ok'] is True
        assert 'version' in data
        assert 'time_utc' in data
        assert data['extractors'] == {'pdf': True, 'word': True}

    def test_version(self, client):
        """Version endpoint should return build info"""
        response = client.get('/version')
        assert response.status_code == 200

        data = json.loads(response.data)
        assert 'version' in data
        assert data['features']['ocr'] is False


class TestExtractSuccess:
    """Test successful extraction"""

    def test_plain_text(self, client, upload):
        """Text uploads come back verbatim"""
        response = upload(client, 'resume.txt', b'Jane Doe, backend engineer')
        assert response.status_code == 200

        data = json.loads(response.data)
        assert data['text'] == 'Jane Doe, backend engineer'
        assert data['strategy'] == 'plain_text'

    def test_pdf(self, client, text_pdf, upload):
        response = upload(client, 'resume.pdf', text_pdf, 'application/pdf')
        assert response.status_code == 200
        assert 'Hello World' in json.loads(response.data)['text']

    def test_docx(self, client, docx_bytes, tmp_upload_dir, upload):
        """Word uploads work and leave no temp files behind"""
        response = upload(client, 'resume.docx', docx_bytes)
        assert response.status_code == 200
        assert json.loads(response.data)['strategy'] == 'word'
        assert os.listdir(tmp_upload_dir) == []

    def test_legacy_route(self, client, upload):
        response = upload(client, 'resume.txt', b'Jane Doe, backend engineer', path='/extractResume')
        assert response.status_code == 200

    def test_base64_body(self, client, multipart, content_type):
        body = multipart([("file", "r.txt", None, b"Base64 transported resume")])
        response = client.post('/extract', data=base64.b64encode(body), content_type=content_type,
                               headers={'X-Body-Encoding': 'base64'})
        assert response.status_code == 200
        assert json.loads(response.data)['text'] == 'Base64 transported resume'

    def test_cors_header(self, client, upload):
        response = upload(client, 'resume.txt', b'Jane Doe, backend engineer')
        assert response.headers['Access-Control-Allow-Origin'] == '*'


class TestExtractClientErrors:
    """Test 400-class responses"""

    def test_missing_boundary(self, client, multipart):
        body = multipart([("file", "r.txt", None, b"Hello there, world")])
        response = client.post('/extract', data=body, content_type='multipart/form-data')
        assert response.status_code == 400

        data = json.loads(response.data)
        assert data['error'] == 'Could not find multipart boundary'

    def test_not_multipart(self, client):
        response = client.post('/extract', data=json.dumps({'text': 'x'}), content_type='application/json')
        assert response.status_code == 400
        assert json.loads(response.data)['error'] == 'Content-Type is not multipart/form-data'

    def test_no_body(self, client, content_type):
        response = client.post('/extract', data=b'', content_type=content_type)
        assert response.status_code == 400
        assert json.loads(response.data)['error'] == 'No body in request'

    def test_no_file_part(self, client, multipart, content_type):
        body = multipart([("name", None, None, b"Jane")])
        response = client.post('/extract', data=body, content_type=content_type)
        assert response.status_code == 400
        assert json.loads(response.data)['kind'] == 'no_file_part'

    def test_get_not_allowed(self, client):
        response = client.get('/extract')
        assert response.status_code == 405

    def test_preflight(self, client):
        response = client.options('/extract')
        assert response.status_code == 204
        assert 'POST' in response.headers['Access-Control-Allow-Methods']

    def test_too_large(self, tmp_upload_dir, upload):
        app = create_app('testing', EXTRACT_TMP_DIR=str(tmp_upload_dir), MAX_CONTENT_LENGTH=64)
        client = app.test_client()
        response = upload(client, 'big.txt', b'x' * 1024)
        assert response.status_code == 413
        assert 'too large' in json.loads(response.data)['error']


class TestExtractServerErrors:
    """Test exhausted extraction"""

    def test_image_only_pdf(self, client, blank_pdf, upload):
        """No text layer means 500 with per-strategy details"""
        response = upload(client, 'scan.pdf', blank_pdf, 'application/pdf')
        assert response.status_code == 500

        data = json.loads(response.data)
        assert data['error'].startswith('No readable text found')
        assert data['kind'] == 'no_readable_text'
        assert len(data['details']) == 1
        assert data['details'][0].startswith('pdf: ')

    def test_short_text(self, client, upload):
        response = upload(client, 'r.txt', b'Hi')
        assert response.status_code == 500
        assert len(json.loads(response.data)['details']) == 2


class TestConfiguredThreshold:
    """Test that the threshold comes from app config"""

    @pytest.mark.parametrize("min_chars,status", [(0, 200), (2, 200), (3, 500)])
    def test_threshold(self, tmp_upload_dir, min_chars, status, upload):
        app = create_app('testing', EXTRACT_TMP_DIR=str(tmp_upload_dir), EXTRACT_MIN_CHARS=min_chars)
        response = upload(app.test_client(), 'r.txt', b'Hi')
        assert response.status_code == status

    def test_invalid_threshold(self):
        with pytest.raises(ValueError):
            create_app('testing', EXTRACT_MIN_CHARS=-1)
