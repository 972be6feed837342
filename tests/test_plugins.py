import os

import jenkinsrest
from jenkinsrest.plugins import Plugin
from jenkinsrest.plugins import PluginVersion
from tests.base import JenkinsTestBase


class JenkinsPluginsBase(JenkinsTestBase):

    plugin_info_json = {
        u"plugins":
        [
            {
                u"active": u'true',
                u"backupVersion": None,
                u"bundled": u'true',
                u"deleted": u'false',
                u"dependencies": [],
                u"downgradable": u'false',
                u"enabled": u'true',
                u"hasUpdate": u'true',
                u"longName": u"Jenkins Mailer Plugin",
                u"pinned": u'false',
                u"shortName": u"mailer",
                u"supportsDynamicLoad": u"MAYBE",
                u"url": u"http://wiki.jenkins-ci.org/display/JENKINS/Mailer",
                u"version": u"1.5"
            },
            {
                u"active": u'true',
                u"backupVersion": None,
                u"bundled": u'false',
                u"deleted": u'false',
                u"dependencies": [],
                u"downgradable": u'false',
                u"enabled": u'true',
                u"hasUpdate": u'false',
                u"longName": u"Git plugin",
                u"pinned": u'false',
                u"shortName": u"git",
                u"supportsDynamicLoad": u"YES",
                u"url": u"https://plugins.jenkins.io/git",
                u"version": u"4.10.0-rc1"
            },
        ]
    }

    def mock_plugins(self, data=None):
        self.req_mock.get(self.make_url('/pluginManager/api/json'),
                          json=data or self.plugin_info_json)


class JenkinsGetPluginsTest(JenkinsPluginsBase):

    def test_simple(self):
        self.mock_plugins()

        plugins = self.j.get_plugins()

        self.assertEqual(plugins.count(), 2)
        self.assertEqual(self.req_mock.last_request.qs, {'depth': ['1']})

    def test_depth(self):
        self.mock_plugins()

        self.j.get_plugins(depth=2)

        self.assertEqual(self.req_mock.last_request.qs, {'depth': ['2']})

    def test_lookup_by_short_and_long_name(self):
        self.mock_plugins()

        plugins = self.j.get_plugins()

        self.assertEqual(plugins.contains('mailer')['version'], '1.5')
        self.assertEqual(plugins.contains('Jenkins Mailer Plugin'),
                         plugins.contains('mailer'))
        self.assertIsNone(plugins.contains('nope'))

    def test_has_plugin(self):
        self.mock_plugins()

        self.assertTrue(self.j.has_plugin('git'))
        self.assertFalse(self.j.has_plugin('subversion'))

    def test_empty(self):
        self.mock_plugins({'plugins': []})

        plugins = self.j.get_plugins()

        self.assertEqual(plugins.count(), 0)
        self.assertEqual(plugins.get_plugins(), [])

    def test_version_comparison(self):
        self.mock_plugins()

        plugins = self.j.get_plugins().get_plugins()

        self.assertIsInstance(plugins[0]['version'], PluginVersion)
        self.assertTrue(plugins[0]['version'] < '1.10')
        self.assertTrue(plugins[1]['version'] >= '4.9.3')
        self.assertTrue(plugins[1]['version'] == '4.10.0-rc1')

    def test_return_invalid_json(self):
        self.req_mock.get(self.make_url('/pluginManager/api/json'),
                          text='{"plugins": [')

        with self.assertRaises(jenkinsrest.DecodeException):
            self.j.get_plugins()


class PluginVersionTest(JenkinsPluginsBase):

    def test_ordering(self):
        versions = ['1.10', '1.2', '1.2.1', '1.2.alpha', '2.0']
        self.assertEqual(sorted(PluginVersion(v) for v in versions),
                         ['1.2', '1.2.alpha', '1.2.1', '1.10', '2.0'])

    def test_plugin_dict(self):
        plugin = Plugin(shortName='git', version='4.0')
        plugin['version'] = '4.1'
        self.assertIsInstance(plugin['version'], PluginVersion)
        self.assertEqual(str(plugin['version']), '4.1')
        self.assertIsNone(Plugin(shortName='x', version=None)['version'])


class JenkinsManagePluginsTest(JenkinsPluginsBase):

    def test_install(self):
        self.req_mock.post(
            self.make_url('/pluginManager/installNecessaryPlugins'))

        self.assertTrue(self.j.install_plugin('git', '4.10.0'))

        body = self.req_mock.last_request.body
        self.assertEqual(body, b'<jenkins><install plugin="git@4.10.0" />'
                               b'</jenkins>')

    def test_uninstall(self):
        self.req_mock.post(
            self.make_url('/pluginManager/plugin/git/doUninstall'))

        self.assertTrue(self.j.uninstall_plugin('git'))

    def test_upload(self):
        self.req_mock.post(self.make_url('/pluginManager/uploadPlugin'))
        path = os.path.join(os.path.dirname(__file__), 'data', 'sample.hpi')

        self.assertTrue(self.j.upload_plugin(path))

        request = self.req_mock.last_request
        self.assertIn('multipart/form-data', request.headers['Content-Type'])
        self.assertIn(b'filename="sample.hpi"', request.body)
