import jenkinsrest
from tests.jobs.base import JenkinsJobsTestBase


class JenkinsGetJobTest(JenkinsJobsTestBase):

    def setUp(self):
        super(JenkinsGetJobTest, self).setUp()
        self.req_mock.get(self.make_url('/job/Test%20Job/api/json'),
                          json=self.job_info)

    def test_simple(self):
        job = self.j.get_job('Test Job')

        self.assertEqual(job.get_name(), 'Test Job')
        self.assertEqual(job.get_full_name(), 'Test Job')
        self.assertEqual(job.get_description(), 'Foo')
        self.assertTrue(job.is_enabled())
        self.assertFalse(job.is_queued())
        self.assertFalse(job.is_running())
        self.assertEqual(self.got_request_urls(),
                         [self.make_url('/job/Test%20Job/api/json')])

    def test_info_is_a_copy(self):
        job = self.j.get_job('Test Job')
        info = job.info()
        info['description'] = 'changed'
        self.assertEqual(job.get_description(), 'Foo')
        self.assertEqual(job.get_details(), self.job_info)

    def test_parameters(self):
        job = self.j.get_job('Test Job')
        self.assertEqual([p['name'] for p in job.get_parameters()],
                         ['branch'])

    def test_upstream_jobs(self):
        job = self.j.get_job('Test Job')
        upstream = job.get_upstream_jobs()
        self.assertEqual([j.name for j in upstream], ['a/parent'])
        self.assertEqual(upstream[0].base, '/job/a/job/parent')
        self.assertEqual(job.get_downstream_jobs(), [])

    def test_has_queued_build(self):
        self.req_mock.get(self.make_url('/queue/api/json'), json={'items': [
            {'id': 4, 'task': {'name': 'other',
                               'url': 'http://example.com/job/other/'}},
            {'id': 5, 'task': {'name': 'Test Job',
                               'url': 'http://example.com/job/Test%20Job/'}},
        ]})
        job = self.j.get_job('Test Job')

        # the snapshot says otherwise, the queue is asked
        self.assertFalse(job.is_queued())
        self.assertTrue(job.has_queued_build())
        self.assertEqual(self.req_mock.last_request.url,
                         self.make_url('/queue/api/json'))

    def test_has_no_queued_build(self):
        self.req_mock.get(self.make_url('/queue/api/json'), json={'items': [
            {'id': 4, 'task': {'name': 'other',
                               'url': 'http://example.com/job/other/'}}]})

        self.assertFalse(self.j.get_job('Test Job').has_queued_build())

    def test_build_ids(self):
        job = self.j.get_job('Test Job')
        self.assertEqual([b['number'] for b in job.get_build_ids()], [2, 1])

    def test_builds_by_kind(self):
        self.req_mock.get(self.make_url('/job/Test%20Job/2/api/json'),
                          json={'number': 2, 'result': 'FAILURE'})
        self.req_mock.get(self.make_url('/job/Test%20Job/1/api/json'),
                          json={'number': 1, 'result': 'SUCCESS'})
        job = self.j.get_job('Test Job')

        self.assertEqual(job.get_last_build().get_number(), 2)
        self.assertEqual(job.get_first_build().get_number(), 1)
        self.assertTrue(job.get_last_successful_build().is_good())
        self.assertEqual(
            self.req_mock.last_request.url,
            self.make_url('/job/Test%20Job/1/api/json?depth=1'))

    def test_missing_build_kind(self):
        job = self.j.get_job('Test Job')
        with self.assertRaises(jenkinsrest.NotFoundException) as cm:
            job.get_last_failed_build()
        self.assertEqual(str(cm.exception),
                         'job[Test Job] has no lastFailedBuild')

    def test_all_build_ids(self):
        self.req_mock.get(self.make_url('/job/Test%20Job/api/json'),
                          json={'allBuilds': [{'number': 3, 'url': 'u3'},
                                              {'number': 1, 'url': 'u1'}]})
        job = jenkinsrest.Job(self.j, 'Test Job')

        ids = job.get_all_build_ids()

        self.assertEqual([b['number'] for b in ids], [3, 1])
        self.assertEqual(self.req_mock.last_request.qs,
                         {'tree': ['allbuilds[number,url]']})

    def test_poll_depth(self):
        job = jenkinsrest.Job(self.j, 'Test Job')
        job.poll(depth=2)
        self.assertEqual(self.req_mock.last_request.qs, {'depth': ['2']})


class JenkinsGetJobErrorsTest(JenkinsJobsTestBase):

    def test_missing(self):
        self.req_mock.get(self.make_url('/job/missing/api/json'),
                          status_code=404)

        with self.assertRaises(jenkinsrest.NotFoundException) as cm:
            self.j.get_job('missing')
        self.assertEqual(str(cm.exception), 'job[/job/missing] does not exist')
        self.assertEqual(cm.exception.kind, 'not-found')

    def test_return_invalid_json(self):
        self.req_mock.get(self.make_url('/job/broken/api/json'),
                          text='Invalid JSON')

        with self.assertRaises(jenkinsrest.DecodeException):
            self.j.get_job('broken')

    def test_disabled(self):
        self.req_mock.get(self.make_url('/job/off/api/json'),
                          json={'name': 'off', 'color': 'disabled'})
        self.assertFalse(self.j.get_job('off').is_enabled())

    def test_running(self):
        self.req_mock.get(self.make_url('/job/on/api/json'),
                          json={'name': 'on', 'color': 'blue_anime'})
        self.assertTrue(self.j.get_job('on').is_running())


class JenkinsGetJobInFolderTest(JenkinsJobsTestBase):

    def test_nested_name(self):
        self.req_mock.get(self.make_url('/job/a/job/b/job/demo/api/json'),
                          json={'name': 'demo', 'fullName': 'a/b/demo'})

        job = self.j.get_job('a/b/demo')

        self.assertEqual(job.get_name(), 'demo')
        self.assertEqual(job.get_full_name(), 'a/b/demo')

    def test_folder(self):
        self.req_mock.get(self.make_url('/job/a/api/json'), json={
            'name': 'a',
            'jobs': [{'name': 'demo', 'url': 'http://...', 'color': 'blue'}]})
        self.req_mock.get(self.make_url('/job/a/job/demo/api/json'),
                          json={'name': 'demo', 'fullName': 'a/demo'})

        folder = self.j.get_folder('a')
        self.assertEqual(folder.get_inner_jobs_metadata()[0]['name'], 'demo')
        self.assertEqual([j.name for j in folder.get_inner_jobs()],
                         ['a/demo'])
        self.assertEqual(folder.get_job('demo').get_full_name(), 'a/demo')

    def test_missing_folder(self):
        self.req_mock.get(self.make_url('/job/nope/api/json'),
                          status_code=404)

        with self.assertRaises(jenkinsrest.NotFoundException) as cm:
            self.j.get_folder('nope')
        self.assertEqual(str(cm.exception),
                         'folder[/job/nope] does not exist')
