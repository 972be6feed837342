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
.. module:: jenkinsrest.build
    :platform: Unix, Windows
    :synopsis: Builds of a job
'''

import collections
import datetime
from urllib.parse import unquote

from jenkinsrest import endpoints
from jenkinsrest.artifact import Artifact
from jenkinsrest.exceptions import NotFoundException
from jenkinsrest.pollable import Pollable

#: one chunk of progressive console output
ConsoleLog = collections.namedtuple('ConsoleLog', 'content offset has_more')

#: what is fetched of a downstream job to find the builds a build triggered
DOWNSTREAM_TREE = ('builds[number,url,'
                   'actions[causes[upstreamProject,upstreamBuild]]]')


class Build(Pollable):
    '''Build ``number`` of the job named ``job_name``.

    Causes, parameters and revisions are looked up by scanning every entry
    of ``actions`` for the key that identifies them; the server does not
    keep actions in a stable order.
    '''

    kind = 'build'
    depth = 1

    def __init__(self, jenkins, job_name, number, raw=None):
        base = endpoints.BUILD % {'job_url': endpoints.job_path(job_name),
                                  'number': int(number)}
        super(Build, self).__init__(jenkins, base, raw)
        self.job_name = job_name
        self.number = int(number)

    def get_number(self):
        return self._get('number', self.number)

    def get_url(self):
        return self._get('url', '')

    def get_result(self):
        return self._raw.get('result')

    def is_running(self):
        return bool(self._get('building', False))

    def is_good(self):
        return not self.is_running() and self.get_result() == 'SUCCESS'

    def get_duration(self):
        '''Build duration in milliseconds, ``int``.'''
        return self._get('duration', 0)

    def get_timestamp(self):
        '''Start time of the build, ``datetime`` in UTC, or None.'''
        timestamp = self._raw.get('timestamp')
        if timestamp is None:
            return None
        return datetime.datetime.fromtimestamp(timestamp / 1000.0,
                                               datetime.timezone.utc)

    def get_culprits(self):
        return list(self._get('culprits', []))

    def get_actions(self):
        return [action for action in self._get('actions', []) if action]

    def _scan_actions(self, key):
        values = []
        for action in self.get_actions():
            values.extend(action.get(key) or [])
        return values

    def get_causes(self):
        return self._scan_actions('causes')

    def get_parameters(self):
        return self._scan_actions('parameters')

    def _last_built_revision(self):
        for action in self.get_actions():
            if action.get('lastBuiltRevision'):
                return action['lastBuiltRevision']
        return {}

    def get_revision(self):
        '''SHA1 of the revision built, ``str`` or None.'''
        return self._last_built_revision().get('SHA1')

    def get_revision_branch(self):
        '''Names of the branches pointing at the revision built, ``[str]``.'''
        return [branch.get('name')
                for branch in self._last_built_revision().get('branch', [])]

    def get_upstream_job_name(self):
        for cause in self.get_causes():
            if cause.get('upstreamProject'):
                return cause['upstreamProject']
        return None

    def get_upstream_build_number(self):
        for cause in self.get_causes():
            if cause.get('upstreamBuild') is not None:
                return cause['upstreamBuild']
        return None

    def is_triggered_by(self, job_name, number):
        '''True if build ``number`` of ``job_name`` caused this build.'''
        return any(cause.get('upstreamProject') == job_name and
                   cause.get('upstreamBuild') == number
                   for cause in self.get_causes())

    def get_upstream_job(self, scope=None):
        '''Return the job that triggered this build, polled, or None.'''
        name = self.get_upstream_job_name()
        if name is None:
            return None
        return self.jenkins.get_job(name, scope=scope)

    def get_upstream_build(self, scope=None):
        '''Return the build that triggered this build, polled, or None.'''
        name = self.get_upstream_job_name()
        number = self.get_upstream_build_number()
        if name is None or number is None:
            return None
        return self.jenkins.get_build(name, number, scope=scope)

    def get_downstream_jobs(self, scope=None):
        '''Return the jobs downstream of this build's job, unpolled.'''
        job = self.jenkins.get_job(self.job_name, scope=scope)
        return job.get_downstream_jobs()

    def get_downstream_builds(self, scope=None):
        '''Return the builds this build triggered.

        The builds of every downstream job are scanned for an upstream
        cause naming this build. Their snapshots only hold ``number``,
        ``url`` and ``actions``; poll them for the rest.

        :returns: ``[Build]``
        '''
        builds = []
        for job in self.get_downstream_jobs(scope=scope):
            _, data = self.requester.get_json(
                job.base, query={'tree': DOWNSTREAM_TREE}, scope=scope)
            for entry in data.get('builds', []):
                build = Build(self.jenkins, job.name, entry['number'], entry)
                if build.is_triggered_by(self.job_name, self.number):
                    builds.append(build)
        return builds

    def get_matrix_runs(self):
        '''Return the configuration runs of a matrix build, ``[MatrixRun]``.

        Runs left over from earlier builds are listed by the server with
        their own number and are skipped.
        '''
        return [MatrixRun(self.jenkins, self.job_name, run['number'],
                          run['url'], run)
                for run in self._get('runs', [])
                if run.get('number') == self.number]


    def get_artifacts(self):
        return [Artifact(self.jenkins, self, artifact['relativePath'],
                         artifact.get('fileName'))
                for artifact in self._get('artifacts', [])]

    def get_console_output(self, scope=None):
        '''Get build console text, ``str``.'''
        _, text = self.requester.get_raw(
            self.base + endpoints.BUILD_CONSOLE_OUTPUT, scope=scope)
        return text

    def get_console_output_from_index(self, start=0, scope=None):
        '''Get the console output written since offset ``start``.

        Feed the returned offset back in to follow a running build. The
        log is complete once ``has_more`` is false; servers either omit
        ``X-More-Data`` or set it to ``false`` at that point.

        :returns: ``ConsoleLog(content, offset, has_more)``
        '''
        response, text = self.requester.get_raw(
            self.base + endpoints.BUILD_PROGRESSIVE_TEXT,
            query={'start': start}, scope=scope)
        try:
            offset = int(response.headers.get('X-Text-Size', ''))
        except ValueError:
            offset = start + len(text.encode('utf-8'))
        has_more = response.headers.get('X-More-Data', '').lower() == 'true'
        return ConsoleLog(text, offset, has_more)

    def get_test_result(self, depth=0, scope=None):
        '''Get the test report of the build.

        :returns: test report, ``dict`` or None if there is no Test Report
        '''
        try:
            _, data = self.requester.get_json(
                self.base + endpoints.BUILD_TEST_REPORT,
                query={'depth': depth}, scope=scope)
        except NotFoundException:
            # This can happen if the test report wasn't generated for any reason
            return None
        return data

    def get_injected_env_vars(self, scope=None):
        '''Get the variables injected by the EnvInject plugin.

        :returns: ``dict`` or None for workflow jobs, or if the
            EnvInject plugin is not installed
        '''
        try:
            _, data = self.requester.get_json(
                self.base + endpoints.BUILD_ENV_VARS, scope=scope)
        except NotFoundException:
            return None
        return data.get('envMap', {})

    def stop(self, scope=None):
        return self._post(endpoints.STOP_BUILD, scope=scope)

    def delete(self, scope=None):
        return self._post(endpoints.DELETE, scope=scope)


class MatrixRun(Build):
    '''One configuration of a matrix build.

    Configurations live below the matrix job (``/job/a/label=x/5``) so the
    run is addressed by the URL the server lists it under.
    '''

    def __init__(self, jenkins, job_name, number, url, raw=None):
        super(MatrixRun, self).__init__(jenkins, job_name, number, raw)
        self.base = endpoints.path_from_url(url, jenkins.server)

    def get_configuration(self):
        '''Axis values of the run, ``{'label': 'x'}``.'''
        segment = self.base.rsplit('/', 2)[-2]
        return dict(unquote(pair).split('=', 1)
                    for pair in segment.split(',') if '=' in pair)
