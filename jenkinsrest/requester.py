#!/usr/bin/env python
# Software License Agreement (BSD License)
#
# Copyright (c) 2010, Willow Garage, Inc.
# All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions
# are met:
#
#  * Redistributions of source code must retain the above copyright
#    notice, this list of conditions and the following disclaimer.
#  * Redistributions in binary form must reproduce the above
#    copyright notice, this list of conditions and the following
#    disclaimer in the documentation and/or other materials provided
#    with the distribution.
#  * Neither the name of Willow Garage, Inc. nor the names of its
#    contributors may be used to endorse or promote products derived
#    from this software without specific prior written permission.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS
# 'AS IS' AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT
# LIMITED TO, THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS
# FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE
# COPYRIGHT OWNER OR CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT,
# INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING,
# BUT NOT LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES;
# LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER
# CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN CONTRACT, STRICT
# LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN
# ANY WAY OUT OF THE USE OF THIS SOFTWARE, EVEN IF ADVISED OF THE
# POSSIBILITY OF SUCH DAMAGE.

'''
.. module:: jenkinsrest.requester
    :platform: Unix, Windows
    :synopsis: Request/response engine shared by every Jenkins entity

The :class:`Requester` owns the HTTP session, the credentials and the CSRF
crumb of one Jenkins server. Entity code hands it an endpoint path and gets
back the ``requests.Response`` together with the decoded body; failures
are raised as :class:`jenkinsrest.exceptions.JenkinsException` subclasses.
'''

import json
import logging
import mimetypes
import os
import threading
from urllib.parse import urlencode
import xml.etree.ElementTree as ET

import requests
import requests.exceptions as req_exc
from requests.packages.urllib3.exceptions import InsecureRequestWarning

from jenkinsrest import endpoints
from jenkinsrest.exceptions import AuthenticationException
from jenkinsrest.exceptions import AuthorizationException
from jenkinsrest.exceptions import BadHTTPException
from jenkinsrest.exceptions import CancelledException
from jenkinsrest.exceptions import ConflictException
from jenkinsrest.exceptions import DecodeException
from jenkinsrest.exceptions import EmptyResponseException
from jenkinsrest.exceptions import NotFoundException
from jenkinsrest.exceptions import TimeoutException
from jenkinsrest.exceptions import TransportException

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
IDEMPOTENT_METHODS = ('GET', 'HEAD')

JSON_HEADERS = {'Accept': 'application/json'}
XML_HEADERS = {'Accept': 'application/xml'}
FORM_HEADERS = {'Content-Type': 'application/x-www-form-urlencoded'}
POST_JSON_HEADERS = {'Content-Type': 'application/json',
                     'Accept': 'application/json'}
POST_XML_HEADERS = {'Content-Type': 'application/xml; charset=utf-8'}


class WrappedSession(requests.Session):
    """A wrapper for requests.Session to override 'verify' property, ignoring REQUESTS_CA_BUNDLE environment variable.

    This is a workaround for https://github.com/kennethreitz/requests/issues/3829 (will be fixed in requests 3.0.0)
    """

    def merge_environment_settings(self, url, proxies, stream, verify, *args,
                                   **kwargs):
        if self.verify is False:
            verify = False

        return super(WrappedSession, self).merge_environment_settings(url,
                                                                      proxies,
                                                                      stream,
                                                                      verify,
                                                                      *args,
                                                                      **kwargs)


class CrumbCache(object):
    '''Single entry cache for the CSRF crumb of a server.

    The cache is ``absent`` until the first state-changing request, then
    ``fresh`` once a crumb has been fetched, ``stale`` after the server
    rejected it, or ``disabled`` when the server has no crumb issuer.
    '''

    ABSENT = 'absent'
    FRESH = 'fresh'
    STALE = 'stale'
    DISABLED = 'disabled'

    def __init__(self):
        self._lock = threading.Lock()
        self._state = self.ABSENT
        self._crumb = None

    @property
    def state(self):
        with self._lock:
            return self._state

    def get(self):
        '''Return ``(state, crumb)`` atomically.'''
        with self._lock:
            return self._state, self._crumb

    def store(self, crumb):
        with self._lock:
            self._crumb = crumb
            self._state = self.FRESH if crumb else self.DISABLED

    def invalidate(self):
        with self._lock:
            self._crumb = None
            self._state = self.STALE


class Requester(object):

    def __init__(self, base_url, username=None, password=None, timeout=None,
                 ssl_verify=True):
        '''Create the request engine for a Jenkins server.

        :param base_url: URL of Jenkins server, ``str``
        :param username: Server username, ``str``
        :param password: Server password or API token, ``str``
        :param timeout: Server connection timeout in secs (default: not set), ``int``
        :param ssl_verify: Verify the server TLS certificate, ``bool``
        '''
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.crumb = CrumbCache()
        self._session = WrappedSession()
        self._session.verify = ssl_verify

        if username is not None and password is not None:
            self._session.auth = requests.auth.HTTPBasicAuth(
                username.encode('utf-8'), password.encode('utf-8'))

        extra_headers = os.environ.get("JENKINS_API_EXTRA_HEADERS", "")
        if extra_headers:
            logger.warning("JENKINS_API_EXTRA_HEADERS adds these HTTP headers: %s",
                           [token.split(":", 1)[0]
                            for token in extra_headers.split("\n") if ":" in token])
        for token in extra_headers.split("\n"):
            if ":" in token:
                header, value = token.split(":", 1)
                self._session.headers[header.strip()] = value.strip()

        if os.getenv('PYTHONHTTPSVERIFY', '1') == '0':
            logger.debug('PYTHONHTTPSVERIFY=0 detected so we will '
                         'disable requests library SSL verification to keep '
                         'compatibility with older versions.')
            requests.packages.urllib3.disable_warnings(InsecureRequestWarning)
            self._session.verify = False

    @property
    def session(self):
        return self._session

    def close(self):
        '''Dispose of the HTTP session and its cookie jar.'''
        self._session.close()

    def build_url(self, endpoint, query=None):
        '''Return the absolute URL of ``endpoint`` with ``query`` appended.

        :param endpoint: path below the server root, ``str``
        :param query: query parameters, ``dict`` or list of pairs
        :returns: ``str``
        '''
        if endpoint and not endpoint.startswith('/'):
            endpoint = '/' + endpoint
        url = self.base_url + endpoint
        if query:
            url += '?' + urlencode(query, doseq=True)
        return url

    def get_json(self, endpoint, query=None, scope=None):
        '''GET ``endpoint`` and decode the body as JSON.

        ``/api/json`` is appended unless the path already is an API path.

        :returns: Tuple [ ``requests.Response``, decoded JSON ]
        '''
        response, content = self._request(
            'GET', self._json_endpoint(endpoint), query=query, scope=scope,
            headers=JSON_HEADERS)
        if not content:
            raise EmptyResponseException(
                "Error communicating with server[%s]: "
                "empty response" % self.base_url, status=response.status_code)
        return response, self._decode_json(content, response)

    def get_xml(self, endpoint, query=None, scope=None):
        '''GET ``endpoint`` and parse the body as XML.

        :returns: Tuple [ ``requests.Response``, ``ET.Element`` ]
        '''
        response, content = self._request(
            'GET', endpoint, query=query, scope=scope, headers=XML_HEADERS)
        if not content:
            raise EmptyResponseException(
                "Error communicating with server[%s]: "
                "empty response" % self.base_url, status=response.status_code)
        try:
            return response, ET.fromstring(content)
        except ET.ParseError as e:
            raise DecodeException(
                'Could not parse XML from [%s]: %s' % (response.url, e),
                status=response.status_code)

    def get_raw(self, endpoint, query=None, scope=None, binary=False):
        '''GET ``endpoint`` and return the body untouched.

        :param binary: return ``bytes`` instead of text, ``bool``
        :returns: Tuple [ ``requests.Response``, ``str`` or ``bytes`` ]
        '''
        response, content = self._request('GET', endpoint, query=query,
                                          scope=scope)
        if binary:
            return response, content
        return response, content.decode('utf-8', 'replace')

    def post_form(self, endpoint, form=None, query=None, scope=None,
                  follow_redirects=True):
        '''POST a form-urlencoded body.

        :param form: form fields, ``dict`` or list of pairs
        :param follow_redirects: set to ``False`` to read ``Location``
            from the first response, ``bool``
        :returns: Tuple [ ``requests.Response``, decoded JSON or None ]
        '''
        response, content = self._request(
            'POST', endpoint, query=query, scope=scope, data=form,
            headers=FORM_HEADERS, follow_redirects=follow_redirects)
        return response, self._maybe_json(content)

    def post_json(self, endpoint, payload, query=None, scope=None,
                  follow_redirects=True):
        '''POST ``payload`` as JSON and decode the JSON response.'''
        response, content = self._request(
            'POST', endpoint, query=query, scope=scope,
            data=json.dumps(payload).encode('utf-8'),
            headers=POST_JSON_HEADERS, follow_redirects=follow_redirects)
        if not content:
            return response, None
        return response, self._decode_json(content, response)

    def post_xml(self, endpoint, xml_body, query=None, scope=None,
                 follow_redirects=True):
        '''POST a configuration document.

        :param xml_body: the document, ``str``, ``bytes`` or ``ET.Element``
        '''
        if ET.iselement(xml_body):
            xml_body = ET.tostring(xml_body, encoding='unicode')
        if not isinstance(xml_body, bytes):
            xml_body = xml_body.encode('utf-8')
        response, content = self._request(
            'POST', endpoint, query=query, scope=scope, data=xml_body,
            headers=POST_XML_HEADERS, follow_redirects=follow_redirects)
        return response, self._maybe_json(content)

    def post_files(self, endpoint, form=None, files=(), query=None,
                   scope=None, follow_redirects=True):
        '''POST a multipart body made of form fields and files.

        Form fields come first, then one ``file`` part per path named by
        the path's basename.

        :param files: paths of the files to upload, ``list``
        '''
        parts = []
        for path in files:
            with open(path, 'rb') as fp:
                data = fp.read()
            mime_type = mimetypes.guess_type(path)[0]
            parts.append(('file', (os.path.basename(path), data,
                                   mime_type or 'application/octet-stream')))
        response, content = self._request(
            'POST', endpoint, query=query, scope=scope, data=form,
            files=parts, follow_redirects=follow_redirects)
        return response, self._maybe_json(content)

    def _json_endpoint(self, endpoint):
        if endpoint.endswith(endpoints.API_JSON) or '/wfapi' in endpoint:
            return endpoint
        return endpoint.rstrip('/') + endpoints.API_JSON

    def _request(self, method, endpoint, query=None, scope=None, data=None,
                 files=None, headers=None, follow_redirects=True):
        url = self.build_url(endpoint, query)
        mutating = method not in IDEMPOTENT_METHODS
        crumb_renewed = False
        while True:
            req = requests.Request(method, url, data=data, files=files,
                                   headers=dict(headers or {}))
            if mutating:
                self._maybe_add_crumb(req, scope)
            response, content = self._send(req, scope, follow_redirects,
                                           retry=not mutating)
            if (response.status_code == 403 and mutating and
                    not crumb_renewed and b'crumb' in content.lower()):
                logger.debug('Crumb rejected by server[%s], renewing it',
                             self.base_url)
                self.crumb.invalidate()
                crumb_renewed = True
                continue
            self._check_status(method, response, content, crumb_renewed)
            return response, content

    def _send(self, req, scope, follow_redirects, retry):
        r = self._session.prepare_request(req)
        # requests.Session.send() does not honor env settings by design
        # see https://github.com/requests/requests/issues/2807
        _settings = self._session.merge_environment_settings(
            r.url, {}, True, self._session.verify, None)
        attempts = 2 if retry else 1
        for attempt in range(attempts):
            if scope is not None:
                scope.check()
            _settings['timeout'] = self._timeout(scope)
            logger.debug('%s %s', r.method, r.url)
            try:
                response = self._session.send(
                    r, allow_redirects=follow_redirects, **_settings)
            except (req_exc.ConnectionError, req_exc.Timeout) as e:
                if scope is not None:
                    scope.check()
                if attempt + 1 < attempts:
                    logger.warning('Retrying %s %s after error: %s',
                                   r.method, r.url, e)
                    continue
                if isinstance(e, req_exc.Timeout):
                    raise TimeoutException('Error in request: %s' % e)
                raise TransportException('Error in request: %s' % e)
            except req_exc.RequestException as e:
                raise TransportException('Error in request: %s' % e)
            logger.debug('%s %s returned %s', r.method, r.url,
                         response.status_code)
            return response, self._read_body(response, scope)

    def _read_body(self, response, scope):
        chunks = []
        try:
            for chunk in response.iter_content(CHUNK_SIZE):
                if scope is not None and scope.cancelled:
                    response.close()
                    raise CancelledException('Request cancelled while '
                                             'reading [%s]' % response.url)
                chunks.append(chunk)
        except req_exc.RequestException as e:
            response.close()
            raise TransportException('Error reading response: %s' % e)
        return b''.join(chunks)

    def _timeout(self, scope):
        remaining = scope.remaining() if scope is not None else None
        if remaining is None:
            return self.timeout
        if self.timeout is None:
            return remaining
        return min(self.timeout, remaining)

    def _maybe_add_crumb(self, req, scope):
        state, crumb = self.crumb.get()
        if state in (CrumbCache.ABSENT, CrumbCache.STALE):
            crumb = self._fetch_crumb(scope)
        if crumb:
            req.headers[crumb['crumbRequestField']] = crumb['crumb']

    def _fetch_crumb(self, scope):
        logger.debug('Requesting crumb from server[%s]', self.base_url)
        try:
            _, crumb = self.get_json(endpoints.CRUMB_URL, scope=scope)
        except (NotFoundException, EmptyResponseException):
            # no crumb issuer, CSRF protection is disabled
            crumb = None
        self.crumb.store(crumb)
        return crumb

    def _check_status(self, method, response, content, crumb_renewed):
        status = response.status_code
        if status < 400:
            return
        body = self._diagnostic_body(content)
        msg = 'Error in request [%s %s]: %s %s' % (
            method, response.url, status, response.reason)
        if status == 401:
            raise AuthenticationException(
                'Possibly authentication failed. ' + msg, status, body)
        if status == 403:
            if crumb_renewed:
                raise AuthenticationException(
                    'Crumb rejected after renewal. ' + msg, status, body)
            raise AuthorizationException(msg, status, body)
        if status == 404 and method in IDEMPOTENT_METHODS:
            raise NotFoundException('Requested item could not be found',
                                    status, body)
        if status == 409:
            raise ConflictException(
                'Resource already exists, conflict status returned',
                status, body)
        raise BadHTTPException(msg, status, body)

    def _decode_json(self, content, response):
        try:
            return json.loads(content.decode('utf-8'))
        except ValueError:
            raise DecodeException(
                'Could not parse JSON info from [%s]' % response.url,
                status=response.status_code)

    def _maybe_json(self, content):
        if not content:
            return None
        try:
            return json.loads(content.decode('utf-8'))
        except ValueError:
            return None

    def _diagnostic_body(self, content):
        if not content:
            return None
        text = content.decode('utf-8', 'replace')
        try:
            return json.loads(text)
        except ValueError:
            return text
