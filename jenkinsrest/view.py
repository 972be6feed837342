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
.. module:: jenkinsrest.view
    :platform: Unix, Windows
    :synopsis: Views
'''

import json

from jenkinsrest import endpoints
from jenkinsrest.exceptions import BadHTTPException
from jenkinsrest.exceptions import NotFoundException
from jenkinsrest.pollable import Pollable

LIST_VIEW = 'hudson.model.ListView'
NESTED_VIEW = 'hudson.plugins.nested_view.NestedView'
MY_VIEW = 'hudson.model.MyView'
DASHBOARD_VIEW = 'hudson.plugins.view.dashboard.Dashboard'
PIPELINE_VIEW = ('au.com.centrumsystems.hudson.plugin.buildpipeline.'
                 'BuildPipelineView')

VIEW_TYPES = (LIST_VIEW, NESTED_VIEW, MY_VIEW, DASHBOARD_VIEW, PIPELINE_VIEW)


class View(Pollable):

    kind = 'view'

    def __init__(self, jenkins, name, raw=None):
        base = endpoints.VIEW % {'name': endpoints.quote_segment(name)}
        super(View, self).__init__(jenkins, base, raw)
        self.name = name

    def create(self, view_type=LIST_VIEW, scope=None):
        '''Create the view and poll it.

        :param view_type: one of the ``*_VIEW`` classes, ``str``
        '''
        if view_type not in VIEW_TYPES:
            raise ValueError('unknown view type %s' % view_type)
        form = {
            'name': self.name,
            'mode': view_type,
            'Submit': 'OK',
            'json': json.dumps({'name': self.name, 'mode': view_type}),
        }
        self.requester.post_form(endpoints.CREATE_VIEW, form,
                                 query={'name': self.name}, scope=scope)
        self.poll(scope=scope)
        return self

    def get_name(self):
        return self._get('name', self.name)

    def get_description(self):
        return self._get('description', '')

    def get_url(self):
        return self._get('url', '')

    def get_jobs(self):
        '''Jobs of the view, ``[{'name': str, 'url': str, 'color': str}]``.'''
        return list(self._get('jobs', []))

    def get_job_names(self):
        return [job['name'] for job in self._get('jobs', [])]

    def add_job(self, name, scope=None):
        return self._post(endpoints.ADD_JOB_TO_VIEW, query={'name': name},
                          scope=scope)

    def delete_job(self, name, scope=None):
        return self._post(endpoints.REMOVE_JOB_FROM_VIEW,
                          query={'name': name}, scope=scope)

    def delete(self, scope=None):
        return self._post(endpoints.DELETE, scope=scope)

    def get_config(self, scope=None):
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
