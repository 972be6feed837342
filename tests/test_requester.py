import json
import os

from mock import patch
import requests

from jenkinsrest import endpoints
from jenkinsrest import exceptions
from jenkinsrest import requester
from jenkinsrest.scope import Scope
from tests.base import JenkinsTestBase
from tests.helper import build_response_mock


class RequesterTestBase(JenkinsTestBase):

    def setUp(self):
        super(RequesterTestBase, self).setUp()
        self.r = requester.Requester(self.base_url, 'test', 'test')


class RequesterConstructorTest(RequesterTestBase):

    def test_url_with_trailing_slash(self):
        r = requester.Requester(self.base_url + '/')
        self.assertEqual(r.base_url, self.base_url)

    def test_basic_auth(self):
        self.req_mock.get(self.make_url('/api/json'), json={})
        self.r.get_json(endpoints.ROOT)
        self.assertEqual(
            self.req_mock.last_request.headers['Authorization'],
            'Basic dGVzdDp0ZXN0')

    def test_unicode_password(self):
        r = requester.Requester(self.base_url, u'nonascii',
                                u'\xe9\u20ac')
        self.req_mock.get(self.make_url('/api/json'), json={})
        r.get_json(endpoints.ROOT)
        self.assertEqual(
            self.req_mock.last_request.headers['Authorization'],
            'Basic bm9uYXNjaWk6w6nigqw=')

    def test_without_user_or_password(self):
        r = requester.Requester(self.base_url)
        self.req_mock.get(self.make_url('/api/json'), json={})
        r.get_json(endpoints.ROOT)
        self.assertNotIn('Authorization',
                         self.req_mock.last_request.headers)

    def test_credentials_never_in_url(self):
        self.req_mock.get(self.make_url('/api/json'), json={})
        self.r.get_json(endpoints.ROOT)
        self.assertNotIn('test@', self.req_mock.last_request.url)

    def test_default_timeout(self):
        self.assertIsNone(self.r.timeout)

    def test_ssl_verify_default(self):
        self.assertTrue(self.r.session.verify)

    def test_ssl_verify_disabled(self):
        r = requester.Requester(self.base_url, ssl_verify=False)
        self.assertFalse(r.session.verify)

    @patch.dict(os.environ, {'PYTHONHTTPSVERIFY': '0'})
    def test_pythonhttpsverify_disables_verification(self):
        r = requester.Requester(self.base_url)
        self.assertFalse(r.session.verify)

    @patch.dict(os.environ, {
        'JENKINS_API_EXTRA_HEADERS': 'X-Team: ci\nX-Trace:  abc \nbogus'})
    def test_extra_headers(self):
        r = requester.Requester(self.base_url)
        self.req_mock.get(self.make_url('/api/json'), json={})
        r.get_json(endpoints.ROOT)
        headers = self.req_mock.last_request.headers
        self.assertEqual(headers['X-Team'], 'ci')
        self.assertEqual(headers['X-Trace'], 'abc')

    def test_wrapped_session_keeps_verify_disabled(self):
        session = requester.WrappedSession()
        session.verify = False
        with patch.dict(os.environ, {'REQUESTS_CA_BUNDLE': '/tmp/ca.pem'}):
            settings = session.merge_environment_settings(
                self.make_url('/'), {}, None, True, None)
        self.assertFalse(settings['verify'])


class RequesterUrlTest(RequesterTestBase):

    def test_build_url(self):
        self.assertEqual(self.r.build_url('/job/a'),
                         self.make_url('/job/a'))
        self.assertEqual(self.r.build_url('job/a'),
                         self.make_url('/job/a'))

    def test_build_url_with_query(self):
        self.assertEqual(
            self.r.build_url('/job/a/api/json',
                             [('tree', 'jobs[name]'), ('depth', 1)]),
            self.make_url('/job/a/api/json?tree=jobs%5Bname%5D&depth=1'))

    def test_json_endpoint_appends_api_json(self):
        self.req_mock.get(self.make_url('/job/a/api/json'), json={})
        self.r.get_json('/job/a')
        self.r.get_json('/job/a/api/json')
        self.assertEqual(self.got_request_urls(),
                         [self.make_url('/job/a/api/json')] * 2)

    def test_json_endpoint_keeps_wfapi(self):
        self.req_mock.get(self.make_url('/job/a/wfapi/runs'), json=[])
        _, data = self.r.get_json('/job/a/wfapi/runs')
        self.assertEqual(data, [])

    def test_quoted_segments(self):
        self.req_mock.get(self.make_url('/job/a%20b/job/c%2Fd/api/json'),
                          json={'name': 'c/d'})
        _, data = self.r.get_json(endpoints.JOB % {
            'folder_url': '/job/' + endpoints.quote_segment('a b'),
            'short_name': endpoints.quote_segment('c/d')})
        self.assertEqual(data, {'name': 'c/d'})


class RequesterDecodeTest(RequesterTestBase):

    def test_get_json(self):
        self.req_mock.get(self.make_url('/api/json'), json={'mode': 'NORMAL'},
                          headers={'X-Jenkins': '2.401'})
        response, data = self.r.get_json('/')
        self.assertEqual(data, {'mode': 'NORMAL'})
        self.assertEqual(response.headers['X-Jenkins'], '2.401')
        self.assertEqual(self.req_mock.last_request.headers['Accept'],
                         'application/json')

    def test_get_json_empty(self):
        self.req_mock.get(self.make_url('/api/json'), text='')
        with self.assertRaises(exceptions.EmptyResponseException) as cm:
            self.r.get_json('/')
        self.assertEqual(cm.exception.kind, 'protocol')

    def test_get_json_invalid(self):
        self.req_mock.get(self.make_url('/api/json'), text='Invalid JSON')
        with self.assertRaises(exceptions.DecodeException) as cm:
            self.r.get_json('/')
        self.assertEqual(cm.exception.kind, 'decode')
        self.assertEqual(cm.exception.status, 200)

    def test_get_xml(self):
        self.req_mock.get(self.make_url('/computer/n/config.xml'),
                          text='<slave><name>n</name></slave>')
        _, root = self.r.get_xml('/computer/n/config.xml')
        self.assertEqual(root.tag, 'slave')
        self.assertEqual(root.findtext('name'), 'n')

    def test_get_xml_invalid(self):
        self.req_mock.get(self.make_url('/computer/n/config.xml'),
                          text='<slave>')
        with self.assertRaises(exceptions.DecodeException):
            self.r.get_xml('/computer/n/config.xml')

    def test_get_raw(self):
        self.req_mock.get(self.make_url('/job/a/1/consoleText'),
                          content=u'caf\xe9\n'.encode('utf-8'))
        _, text = self.r.get_raw('/job/a/1/consoleText')
        self.assertEqual(text, u'caf\xe9\n')

    def test_get_raw_binary(self):
        self.req_mock.get(self.make_url('/job/a/1/artifact/x.bin'),
                          content=b'\x00\xff\x10')
        _, data = self.r.get_raw('/job/a/1/artifact/x.bin', binary=True)
        self.assertEqual(data, b'\x00\xff\x10')

    def test_post_returns_decoded_json(self):
        self.req_mock.post(self.make_url('/me/generate'),
                           json={'status': 'ok'})
        _, data = self.r.post_form('/me/generate', {'a': 'b'})
        self.assertEqual(data, {'status': 'ok'})

    def test_post_non_json_body(self):
        self.req_mock.post(self.make_url('/job/a/enable'), text='<html/>')
        response, data = self.r.post_form('/job/a/enable')
        self.assertEqual(response.status_code, 200)
        self.assertIsNone(data)


class RequesterPostTest(RequesterTestBase):

    def test_post_form(self):
        self.req_mock.post(self.make_url('/job/a/buildWithParameters'),
                           status_code=201)
        self.r.post_form('/job/a/buildWithParameters', {'branch': 'main'})
        req = self.req_mock.last_request
        self.assertEqual(req.body, 'branch=main')
        self.assertEqual(req.headers['Content-Type'],
                         'application/x-www-form-urlencoded')

    def test_post_json(self):
        self.req_mock.post(self.make_url('/scriptText'), json={'ok': True})
        _, data = self.r.post_json('/scriptText', {'x': [1, 2]})
        req = self.req_mock.last_request
        self.assertEqual(json.loads(req.body.decode('utf-8')), {'x': [1, 2]})
        self.assertEqual(req.headers['Content-Type'], 'application/json')
        self.assertEqual(data, {'ok': True})

    def test_post_xml(self):
        self.req_mock.post(self.make_url('/createItem'))
        self.r.post_xml('/createItem', u'<project><d>\xe9</d></project>',
                        query={'name': 'a'})
        req = self.req_mock.last_request
        self.assertEqual(req.body,
                         u'<project><d>\xe9</d></project>'.encode('utf-8'))
        self.assertEqual(req.headers['Content-Type'],
                         'application/xml; charset=utf-8')
        self.assertEqual(req.url, self.make_url('/createItem?name=a'))

    def test_post_files(self):
        self.req_mock.post(self.make_url('/pluginManager/uploadPlugin'))
        path = os.path.join(os.path.dirname(__file__), 'data',
                            'sample.hpi')
        self.r.post_files('/pluginManager/uploadPlugin',
                          form={'name': 'value'}, files=[path])
        req = self.req_mock.last_request
        self.assertTrue(req.headers['Content-Type'].startswith(
            'multipart/form-data; boundary='))
        body = req.body
        self.assertIn(b'name="name"', body)
        self.assertIn(b'name="file"; filename="sample.hpi"', body)
        self.assertLess(body.index(b'name="name"'),
                        body.index(b'name="file"'))

    def test_no_redirect_follow(self):
        self.req_mock.post(self.make_url('/job/a/build'), status_code=302,
                           headers={'Location': self.make_url('/queue/')})
        response, _ = self.r.post_form('/job/a/build',
                                       follow_redirects=False)
        self.assertEqual(response.status_code, 302)
        self.assertEqual(len(self.requests_to('POST', '/job/a/build')), 1)
        self.assertEqual(self.requests_to('GET', '/queue/'), [])


class RequesterCrumbTest(RequesterTestBase):

    def test_crumb_added_to_post(self):
        self.mock_crumb()
        self.req_mock.post(self.make_url('/job/a/enable'))
        self.r.post_form('/job/a/enable')
        self.r.post_form('/job/a/enable')

        posts = self.requests_to('POST', '/job/a/enable')
        for post in posts:
            self.assertEqual(post.headers['.crumb'],
                             self.crumb_data['crumb'])
        # cached after the first fetch
        self.assertEqual(len(self.requests_to('GET', endpoints.CRUMB_URL)), 1)
        self.assertEqual(self.r.crumb.state, requester.CrumbCache.FRESH)

    def test_no_crumb_on_get(self):
        self.mock_crumb()
        self.req_mock.get(self.make_url('/api/json'), json={})
        self.r.get_json('/')
        self.assertEqual(self.requests_to('GET', endpoints.CRUMB_URL), [])

    def test_crumb_issuer_missing(self):
        self.req_mock.post(self.make_url('/job/a/enable'))
        self.r.post_form('/job/a/enable')
        self.r.post_form('/job/a/enable')

        self.assertNotIn('.crumb', self.req_mock.last_request.headers)
        self.assertEqual(len(self.requests_to('GET', endpoints.CRUMB_URL)), 1)
        self.assertEqual(self.r.crumb.state, requester.CrumbCache.DISABLED)

    def test_crumb_renewed_after_mismatch(self):
        self.mock_crumb()
        self.req_mock.get(self.make_url('/api/json'), json={})
        self.req_mock.post(self.make_url('/job/a/enable'), [
            {'status_code': 403, 'text': 'No valid crumb was included'},
            {'status_code': 200},
        ])

        self.r.get_json('/')
        response, _ = self.r.post_form('/job/a/enable')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            [(req.method, req.url.split('?')[0])
             for req in self.req_mock.request_history],
            [('GET', self.make_url('/api/json')),
             ('GET', self.make_url(endpoints.CRUMB_URL)),
             ('POST', self.make_url('/job/a/enable')),
             ('GET', self.make_url(endpoints.CRUMB_URL)),
             ('POST', self.make_url('/job/a/enable'))])

    def test_crumb_rejected_twice(self):
        self.mock_crumb()
        self.req_mock.post(self.make_url('/job/a/enable'), status_code=403,
                           text='No valid crumb was included')

        with self.assertRaises(exceptions.AuthenticationException) as cm:
            self.r.post_form('/job/a/enable')
        self.assertEqual(cm.exception.status, 403)
        self.assertEqual(len(self.requests_to('POST', '/job/a/enable')), 2)

    def test_403_without_crumb_marker(self):
        self.req_mock.post(self.make_url('/job/a/enable'), status_code=403,
                           text='Access denied')

        with self.assertRaises(exceptions.AuthorizationException) as cm:
            self.r.post_form('/job/a/enable')
        self.assertEqual(cm.exception.kind, 'authorization')
        self.assertEqual(len(self.requests_to('POST', '/job/a/enable')), 1)


class RequesterStatusTest(RequesterTestBase):

    def assert_get_raises(self, status, exc_class, kind):
        self.req_mock.get(self.make_url('/job/a/api/json'),
                          status_code=status, json={'message': 'nope'})
        with self.assertRaises(exc_class) as cm:
            self.r.get_json('/job/a')
        self.assertEqual(cm.exception.kind, kind)
        self.assertEqual(cm.exception.status, status)
        self.assertEqual(cm.exception.body, {'message': 'nope'})

    def test_401(self):
        self.assert_get_raises(401, exceptions.AuthenticationException,
                               'authentication')

    def test_403(self):
        self.assert_get_raises(403, exceptions.AuthorizationException,
                               'authorization')

    def test_404(self):
        self.assert_get_raises(404, exceptions.NotFoundException,
                               'not-found')

    def test_409(self):
        self.assert_get_raises(409, exceptions.ConflictException, 'conflict')

    def test_500(self):
        self.assert_get_raises(500, exceptions.BadHTTPException, 'server')

    def test_404_on_post_is_server_error(self):
        self.req_mock.post(self.make_url('/job/a/doDelete'), status_code=404,
                           text='Not Found')
        with self.assertRaises(exceptions.BadHTTPException) as cm:
            self.r.post_form('/job/a/doDelete')
        self.assertEqual(cm.exception.kind, 'server')
        self.assertEqual(cm.exception.status, 404)
        self.assertEqual(cm.exception.body, 'Not Found')

    def test_3xx_returned(self):
        self.req_mock.get(self.make_url('/job/a'), status_code=304)
        response, _ = self.r.get_raw('/job/a')
        self.assertEqual(response.status_code, 304)


class RequesterTransportTest(RequesterTestBase):

    def test_get_retried_once(self):
        self.req_mock.get(self.make_url('/api/json'), [
            {'exc': requests.exceptions.ConnectionError},
            {'json': {'mode': 'NORMAL'}},
        ])
        _, data = self.r.get_json('/')
        self.assertEqual(data, {'mode': 'NORMAL'})
        self.assertEqual(len(self.req_mock.request_history), 2)

    def test_get_fails_after_retry(self):
        self.req_mock.get(self.make_url('/api/json'),
                          exc=requests.exceptions.ConnectionError)
        with self.assertRaises(exceptions.TransportException) as cm:
            self.r.get_json('/')
        self.assertEqual(cm.exception.kind, 'transport')
        self.assertEqual(len(self.req_mock.request_history), 2)

    def test_timeout(self):
        self.req_mock.get(self.make_url('/api/json'),
                          exc=requests.exceptions.ReadTimeout)
        with self.assertRaises(exceptions.TimeoutException) as cm:
            self.r.get_json('/')
        self.assertEqual(cm.exception.kind, 'transport')

    def test_post_not_retried(self):
        self.req_mock.post(self.make_url('/job/a/build'),
                           exc=requests.exceptions.ConnectionError)
        with self.assertRaises(exceptions.TransportException):
            self.r.post_form('/job/a/build')
        self.assertEqual(len(self.requests_to('POST', '/job/a/build')), 1)

    @patch('jenkinsrest.requester.requests.Session.send', autospec=True)
    def test_redirect_flag_passed_to_session(self, session_send_mock):
        session_send_mock.return_value = build_response_mock(
            201, None, headers={'Location': self.make_url('/queue/item/3/')})
        self.r.crumb.store(None)

        self.r.post_form('/job/a/build', follow_redirects=False)

        self.assertFalse(session_send_mock.call_args[1]['allow_redirects'])
        self.assertTrue(session_send_mock.call_args[1]['stream'])
        self.assertEqual(session_send_mock.call_args[0][1].url,
                         self.make_url('/job/a/build'))


class RequesterScopeTest(RequesterTestBase):

    @patch('jenkinsrest.requester.requests.Session.send', autospec=True)
    def test_cancelled_scope_never_sends(self, session_send_mock):
        scope = Scope()
        scope.cancel()

        with self.assertRaises(exceptions.CancelledException) as cm:
            self.r.get_json('/', scope=scope)
        self.assertEqual(cm.exception.kind, 'cancelled')
        self.assertFalse(session_send_mock.called)

    @patch('jenkinsrest.requester.requests.Session.send', autospec=True)
    def test_expired_scope_never_sends(self, session_send_mock):
        with self.assertRaises(exceptions.CancelledException):
            self.r.post_form('/job/a/build', scope=Scope(timeout=0))
        self.assertFalse(session_send_mock.called)

    def test_timeout_bounded_by_scope(self):
        r = requester.Requester(self.base_url, timeout=30)
        self.assertEqual(r._timeout(None), 30)
        self.assertLessEqual(r._timeout(Scope(timeout=5)), 5)
        r = requester.Requester(self.base_url)
        self.assertIsNone(r._timeout(Scope()))
        self.assertLessEqual(r._timeout(Scope(timeout=5)), 5)

    def test_cancelled_while_reading(self):
        scope = Scope()

        def cancel_on_read(request, context):
            scope.cancel()
            return {'mode': 'NORMAL'}

        self.req_mock.get(self.make_url('/api/json'), json=cancel_on_read)
        with self.assertRaises(exceptions.CancelledException):
            self.r.get_json('/', scope=scope)
