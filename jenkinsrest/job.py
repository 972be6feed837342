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
.. module:: jenkinsrest.job
    :platform: Unix, Windows
    :synopsis: Jobs and folders
'''

import json
import logging

from jenkinsrest import endpoints
from jenkinsrest.build import Build
from jenkinsrest.exceptions import BadHTTPException
from jenkinsrest.exceptions import EmptyResponseException
from jenkinsrest.exceptions import NotFoundException
from jenkinsrest.exceptions import ProtocolException
from jenkinsrest.pipeline import PipelineRun
from jenkinsrest.pollable import Pollable

logger = logging.getLogger(__name__)


def _parameters_json(parameters):
    '''Structured form of build parameters sent along with file uploads.'''
    if isinstance(parameters, dict):
        parameters = parameters.items()
    return json.dumps({'parameter': [{'name': name, 'value': value}
                                     for name, value in parameters or []]})


class Item(Pollable):
    '''An entry of the job tree addressed by its full name.

    :param name: full name, with ``/`` between folders, ``str``
    '''

    kind = 'job'

    def __init__(self, jenkins, name, raw=None):
        super(Item, self).__init__(jenkins, endpoints.job_path(name), raw)
        self.name = name.strip('/')

    @property
    def _folder_url(self):
        return endpoints.get_job_folder(self.name)[0]

    @property
    def short_name(self):
        return endpoints.get_job_folder(self.name)[1]

    def get_name(self):
        return self._get('name', self.short_name)

    def get_full_name(self):
        return self._get('fullName', self.name)

    def get_description(self):
        return self._get('description', '')

    def get_url(self):
        return self._get('url', '')

    def get_inner_jobs_metadata(self):
        return list(self._get('jobs', []))

    def get_inner_jobs(self):
        '''Return the unpolled :class:`Job` objects of the items inside.'''
        return [Job(self.jenkins, '%s/%s' % (self.name, job['name']), job)
                for job in self._get('jobs', [])]

    def delete(self, scope=None):
        return self._post(endpoints.DELETE, scope=scope)

    def get_config(self, scope=None):
        '''Return the ``config.xml`` document of the item, ``str``.'''
        _, config = self.requester.get_raw(self.base + endpoints.CONFIG,
                                           scope=scope)
        return config

    def update_config(self, config_xml, scope=None):
        try:
            response, _ = self.requester.post_xml(
                self.base + endpoints.CONFIG, config_xml, scope=scope)
        except BadHTTPException as e:
            if e.status == 404:
                raise NotFoundException('%s[%s] does not exist'
                                        % (self.kind, self.name),
                                        e.status, e.body)
            raise
        return 200 <= response.status_code < 300


class Job(Item):
    '''A job, addressed by its full name (ex.: 'folder/job').'''

    def create(self, config_xml, scope=None):
        '''Create the job from ``config_xml`` and poll it.

        :throws: :class:`jenkinsrest.ConflictException` when it exists
        '''
        endpoint = endpoints.CREATE_ITEM % {'folder_url': self._folder_url}
        self.requester.post_xml(endpoint, config_xml,
                                query={'name': self.short_name}, scope=scope)
        self.poll(scope=scope)
        return self

    def enable(self, scope=None):
        return self._post(endpoints.ENABLE, scope=scope)

    def disable(self, scope=None):
        return self._post(endpoints.DISABLE, scope=scope)

    def rename(self, new_name, scope=None):
        '''Rename the job within its folder.

        :param new_name: new short name of the job, ``str``
        '''
        accepted = self._post(endpoints.RENAME, query={'newName': new_name},
                              scope=scope)
        if accepted:
            folder = self.name.rpartition('/')[0]
            self.name = '%s/%s' % (folder, new_name) if folder else new_name
            self.base = endpoints.job_path(self.name)
        return accepted

    def copy(self, new_name, scope=None):
        '''Copy the job to ``new_name`` in the same folder.

        :returns: the new :class:`Job`, polled
        '''
        endpoint = endpoints.CREATE_ITEM % {'folder_url': self._folder_url}
        self.requester.post_form(
            endpoint, query=[('name', new_name), ('mode', 'copy'),
                             ('from', self.short_name)], scope=scope)
        folder = self.name.rpartition('/')[0]
        job = Job(self.jenkins, '%s/%s' % (folder, new_name) if folder
                  else new_name)
        job.poll(scope=scope)
        return job

    def is_queued(self):
        return bool(self._get('inQueue', False))

    def has_queued_build(self, scope=None):
        '''Ask the build queue whether a build of this job is waiting.

        Unlike :meth:`is_queued` this does not rely on the job snapshot.
        '''
        queue = self.jenkins.get_queue(scope=scope)
        return bool(queue.get_tasks_for_job(self.name))

    def is_enabled(self):
        if 'disabled' in self._raw:
            return not self._raw['disabled']
        if 'buildable' in self._raw:
            return bool(self._raw['buildable'])
        return self._get('color') != 'disabled'

    def is_running(self):
        return str(self._get('color', '')).endswith('_anime')

    def get_details(self):
        return self.info()

    def get_upstream_jobs_metadata(self):
        return list(self._get('upstreamProjects', []))

    def get_downstream_jobs_metadata(self):
        return list(self._get('downstreamProjects', []))

    def get_upstream_jobs(self):
        return [Job(self.jenkins, endpoints.job_name_from_url(job['url']) or
                    job['name'])
                for job in self._get('upstreamProjects', [])]

    def get_downstream_jobs(self):
        return [Job(self.jenkins, endpoints.job_name_from_url(job['url']) or
                    job['name'])
                for job in self._get('downstreamProjects', [])]

    def get_parameters(self):
        '''Return the parameter definitions of the job, ``[dict]``.'''
        parameters = []
        for prop in self._get('property', []):
            if prop:
                parameters.extend(prop.get('parameterDefinitions') or [])
        return parameters

    def get_build_ids(self):
        '''Return the builds listed in the snapshot, ``[dict]``.'''
        return list(self._get('builds', []))

    def get_all_build_ids(self, scope=None):
        '''Fetch every build of the job, not only the latest 100.

        :returns: list of ``{'number': int, 'url': str}``, ``[dict]``
        '''
        _, data = self.requester.get_json(
            self.base, query={'tree': 'allBuilds[number,url]'}, scope=scope)
        return data.get('allBuilds', [])

    def get_build(self, number, scope=None):
        '''Return build ``number`` of this job, polled.'''
        build = Build(self.jenkins, self.name, number)
        build.poll(scope=scope)
        return build

    def _get_build_by_kind(self, build_kind, scope):
        ref = self._raw.get(build_kind)
        if not ref:
            raise NotFoundException('job[%s] has no %s' % (self.name,
                                                           build_kind))
        return self.get_build(ref['number'], scope=scope)

    def get_first_build(self, scope=None):
        return self._get_build_by_kind('firstBuild', scope)

    def get_last_build(self, scope=None):
        return self._get_build_by_kind('lastBuild', scope)

    def get_last_completed_build(self, scope=None):
        return self._get_build_by_kind('lastCompletedBuild', scope)

    def get_last_failed_build(self, scope=None):
        return self._get_build_by_kind('lastFailedBuild', scope)

    def get_last_stable_build(self, scope=None):
        return self._get_build_by_kind('lastStableBuild', scope)

    def get_last_successful_build(self, scope=None):
        return self._get_build_by_kind('lastSuccessfulBuild', scope)

    def invoke(self, parameters=None, token=None, files=None, scope=None):
        '''Trigger a build of the job.

        The server answers with the location of the new queue item; the
        request is not redirected so that location can be read.

        :param parameters: build parameters, ``dict`` or list of pairs
        :param token: build token configured on the job, ``str``
        :param files: paths of files for file parameters, ``list``
        :returns: queue item number, ``int``
        '''
        query = {'token': token} if token else None
        try:
            response = self._trigger(parameters, files, query, scope)
        except BadHTTPException as e:
            if e.status == 404:
                raise NotFoundException('%s[%s] does not exist'
                                        % (self.kind, self.name),
                                        e.status, e.body)
            raise

        location = response.headers.get('Location')
        if not location:
            raise EmptyResponseException(
                "Header 'Location' not found in response from "
                "server[%s]" % self.requester.base_url,
                status=response.status_code)
        try:
            return endpoints.queue_id_from_location(location)
        except ValueError:
            raise ProtocolException('Unexpected queue location [%s]'
                                    % location, status=response.status_code)

    def _trigger(self, parameters, files, query, scope):
        if files:
            form = {'json': _parameters_json(parameters)}
            response, _ = self.requester.post_files(
                self.base + endpoints.BUILD_JOB, form, files, query=query,
                scope=scope, follow_redirects=False)
        elif parameters:
            response, _ = self.requester.post_form(
                self.base + endpoints.BUILD_WITH_PARAMS_JOB, parameters,
                query=query, scope=scope, follow_redirects=False)
        else:
            response, _ = self.requester.post_form(
                self.base + endpoints.BUILD_JOB, query=query, scope=scope,
                follow_redirects=False)
        return response

    def get_pipeline_runs(self, scope=None):
        '''Return the runs of a pipeline job, ``[PipelineRun]``.'''
        _, data = self.requester.get_json(
            self.base + endpoints.PIPELINE_RUNS, scope=scope)
        return [PipelineRun(self, run) for run in data or []]

    def get_pipeline_run(self, run_id, scope=None):
        run = PipelineRun(self, {'id': str(run_id)})
        run.poll(scope=scope)
        return run


class Folder(Item):
    '''A folder of the CloudBees folder plugin.'''

    kind = 'folder'

    def create(self, scope=None):
        '''Create the folder inside its parent folder and poll it.'''
        endpoint = endpoints.CREATE_ITEM % {'folder_url': self._folder_url}
        self.requester.post_form(endpoint, {
            'name': self.short_name,
            'mode': endpoints.FOLDER_MODE,
            'from': '',
            'Submit': 'OK',
        }, query={'name': self.short_name, 'mode': endpoints.FOLDER_MODE},
            scope=scope)
        self.poll(scope=scope)
        return self

    def get_job(self, name, scope=None):
        '''Return the job ``name`` inside this folder, polled.'''
        job = Job(self.jenkins, '%s/%s' % (self.name, name))
        job.poll(scope=scope)
        return job

    def get_folder(self, name, scope=None):
        folder = Folder(self.jenkins, '%s/%s' % (self.name, name))
        folder.poll(scope=scope)
        return folder
