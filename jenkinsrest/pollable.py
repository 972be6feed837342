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
.. module:: jenkinsrest.pollable
    :platform: Unix, Windows
    :synopsis: Base class of the entities backed by a JSON snapshot

An entity keeps the last JSON document fetched from its base path. Only
:meth:`Pollable.poll` replaces that snapshot; accessors read it without
any I/O and mutators never refresh it, so call ``poll`` again to see the
effect of a change. Entities shared between threads must be treated as
read-only once polled.
'''

import copy

from jenkinsrest.exceptions import BadHTTPException
from jenkinsrest.exceptions import NotFoundException


class Pollable(object):
    '''An entity refreshed by a JSON GET against its base path.

    :param jenkins: the owning :class:`jenkinsrest.Jenkins` connection
    :param base: path of the entity below the server root, ``str``
    :param raw: an initial snapshot, ``dict``
    '''

    #: noun used in error messages
    kind = 'item'
    #: ``depth`` query sent by :meth:`poll`, None to send none
    depth = None

    def __init__(self, jenkins, base, raw=None):
        self.jenkins = jenkins
        self.base = base
        self._raw = raw if raw is not None else {}

    @property
    def requester(self):
        return self.jenkins.requester

    def _poll_endpoint(self):
        return self.base

    def poll(self, depth=None, scope=None):
        '''Refresh the snapshot from the server.

        :param depth: JSON depth, overrides the entity default, ``int``
        :returns: HTTP status code of the response, ``int``
        '''
        if depth is None:
            depth = self.depth
        query = {'depth': depth} if depth is not None else None
        try:
            response, data = self.requester.get_json(
                self._poll_endpoint(), query=query, scope=scope)
        except NotFoundException as e:
            raise NotFoundException('%s[%s] does not exist'
                                    % (self.kind, self.base),
                                    e.status, e.body)
        self._raw = data
        return response.status_code

    def info(self):
        '''Return a copy of the last snapshot, ``dict``.'''
        return copy.deepcopy(self._raw)

    def _get(self, key, default=None):
        value = self._raw.get(key, default)
        if value is None:
            return default
        return value

    def _post(self, endpoint, form=None, query=None, scope=None):
        '''POST a form to ``base + endpoint``; True when the server accepted it.'''
        try:
            response, _ = self.requester.post_form(
                self.base + endpoint, form, query=query, scope=scope)
        except BadHTTPException as e:
            if e.status == 404:
                raise NotFoundException('%s[%s] does not exist'
                                        % (self.kind, self.base),
                                        e.status, e.body)
            raise
        return 200 <= response.status_code < 300

    def __repr__(self):
        return '<%s %s>' % (type(self).__name__, self.base)
