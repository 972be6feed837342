import unittest

import requests_mock
from testscenarios import TestWithScenarios

import jenkinsrest
from jenkinsrest import endpoints


class JenkinsTestBase(TestWithScenarios, unittest.TestCase):

    crumb_data = {
        "crumb": "dab177f483b3dd93483ef6716d8e792d",
        "crumbRequestField": ".crumb",
    }

    scenarios = [
        ('base_url1', dict(base_url='http://example.com')),
        ('base_url2', dict(base_url='http://example.com/jenkins'))
    ]

    def setUp(self):
        super(JenkinsTestBase, self).setUp()

        self.req_mock = requests_mock.Mocker()
        self.req_mock.start()
        self.addCleanup(self.req_mock.stop)
        # no crumb issuer unless a test registers one
        self.req_mock.get(self.make_url(endpoints.CRUMB_URL), status_code=404)

        self.j = jenkinsrest.Jenkins(self.base_url, 'test', 'test')

    def make_url(self, path):
        if not path.startswith('/'):
            path = '/' + path
        return u'{0}{1}'.format(self.base_url, path)

    def mock_crumb(self):
        return self.req_mock.get(self.make_url(endpoints.CRUMB_URL),
                                 json=self.crumb_data)

    def requests_to(self, method, path):
        '''Requests of the history sent with ``method`` to ``path``.'''
        url = self.make_url(path)
        return [req for req in self.req_mock.request_history
                if req.method == method and req.url.split('?')[0] == url]

    def got_request_urls(self):
        return [req.url for req in self.req_mock.request_history]
