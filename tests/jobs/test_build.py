# -*- coding: utf-8 -*-
import json
import os

from mock import patch

import jenkinsrest
from tests.helper import build_response_mock
from tests.jobs.base import JenkinsJobsTestBase


class JenkinsBuildJobTest(JenkinsJobsTestBase):

    def test_simple(self):
        self.req_mock.post(
            self.make_url('/job/Test%20J%C3%B8b/build'), status_code=201,
            headers={'Location': self.make_url('/queue/item/25/')})

        queue_id = self.j.build_job(u'Test Jøb')

        self.assertEqual(queue_id, 25)
        self.assertEqual(self.req_mock.last_request.url,
                         self.make_url('/job/Test%20J%C3%B8b/build'))

    def test_with_parameters(self):
        self.req_mock.post(
            self.make_url('/job/demo/buildWithParameters'), status_code=201,
            headers={'Location': 'http://host/queue/item/17/'})

        queue_id = self.j.build_job('demo', {'branch': 'main'})

        self.assertEqual(queue_id, 17)
        self.assertIsInstance(queue_id, int)
        self.assertEqual(self.req_mock.last_request.body, 'branch=main')
        # the Location was read, not followed
        self.assertEqual(self.requests_to('GET', '/queue/item/17/'), [])

    def test_redirect_not_followed(self):
        self.req_mock.post(
            self.make_url('/job/demo/build'), status_code=302,
            headers={'Location': self.make_url('/queue/item/3/')})

        self.assertEqual(self.j.build_job('demo'), 3)
        self.assertEqual(len(self.req_mock.request_history), 2)

    def test_with_token(self):
        self.req_mock.post(
            self.make_url('/job/demo/buildWithParameters'), status_code=201,
            headers={'Location': self.make_url('/queue/item/4/')})

        self.j.build_job('demo', {'a': '1'}, token='secret')

        self.assertEqual(
            self.req_mock.last_request.url,
            self.make_url('/job/demo/buildWithParameters?token=secret'))

    def test_in_folder(self):
        self.req_mock.post(
            self.make_url('/job/a/job/demo/build'), status_code=201,
            headers={'Location': self.make_url('/queue/item/5/')})

        self.assertEqual(self.j.build_job('a/demo'), 5)

    def test_with_files(self):
        self.req_mock.post(
            self.make_url('/job/demo/build'), status_code=201,
            headers={'Location': self.make_url('/queue/item/6/')})
        path = os.path.join(os.path.dirname(os.path.dirname(__file__)),
                            'data', 'sample.hpi')

        self.assertEqual(
            self.j.build_job('demo', {'version': '1'}, files=[path]), 6)

        body = self.req_mock.last_request.body
        self.assertIn(b'name="json"', body)
        self.assertIn(json.dumps(
            {'parameter': [{'name': 'version', 'value': '1'}]}).encode(),
            body)
        self.assertIn(b'filename="sample.hpi"', body)

    def test_assert_no_location(self):
        self.req_mock.post(self.make_url('/job/demo/build'), status_code=201)

        with self.assertRaises(jenkinsrest.EmptyResponseException) as cm:
            self.j.build_job('demo')
        self.assertEqual(
            str(cm.exception),
            "Header 'Location' not found in response from server[{0}]".format(
                self.base_url))

    def test_bad_location(self):
        self.req_mock.post(
            self.make_url('/job/demo/build'), status_code=201,
            headers={'Location': self.make_url('/queue/item/abc/')})

        with self.assertRaises(jenkinsrest.ProtocolException):
            self.j.build_job('demo')

    def test_missing_job(self):
        self.req_mock.post(self.make_url('/job/demo/build'), status_code=404)

        with self.assertRaises(jenkinsrest.NotFoundException) as cm:
            self.j.build_job('demo')
        self.assertEqual(str(cm.exception), 'job[demo] does not exist')
        self.assertEqual(cm.exception.status, 404)

    @patch('jenkinsrest.requester.requests.Session.send', autospec=True)
    def test_simple_no_content_length(self, session_send_mock):
        session_send_mock.return_value = build_response_mock(
            201, None, add_content_length=False,
            headers={'Location': self.make_url('/queue/item/25/')})
        self.j.requester.crumb.store(None)

        queue_id = self.j.build_job(u'Test Job')

        self.assertEqual(session_send_mock.call_args[0][1].url,
                         self.make_url('/job/Test%20Job/build'))
        self.assertEqual(queue_id, 25)
