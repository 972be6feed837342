import jenkinsrest
from tests.jobs.base import JenkinsJobsTestBase


class JenkinsDeleteJobTest(JenkinsJobsTestBase):

    def test_simple(self):
        self.req_mock.post(self.make_url('/job/Test%20Job/doDelete'))

        self.assertTrue(self.j.delete_job(u'Test Job'))
        self.assertEqual(len(self.requests_to('POST',
                                              '/job/Test%20Job/doDelete')), 1)

    def test_failed(self):
        self.req_mock.post(self.make_url('/job/TestJob/doDelete'),
                           status_code=404)

        with self.assertRaises(jenkinsrest.NotFoundException) as cm:
            self.j.delete_job(u'TestJob')
        self.assertEqual(str(cm.exception), 'job[/job/TestJob] does not exist')

    def test_redirect_is_success(self):
        self.req_mock.post(self.make_url('/job/TestJob/doDelete'),
                           status_code=302,
                           headers={'Location': self.make_url('/')})
        self.req_mock.get(self.make_url('/'), text='<html/>')

        self.assertTrue(self.j.delete_job(u'TestJob'))
