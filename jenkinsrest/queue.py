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
.. module:: jenkinsrest.queue
    :platform: Unix, Windows
    :synopsis: The build queue and its items
'''

import logging
import time

from jenkinsrest import endpoints
from jenkinsrest.exceptions import BadHTTPException
from jenkinsrest.exceptions import NotFoundException
from jenkinsrest.job import Job
from jenkinsrest.pollable import Pollable

logger = logging.getLogger(__name__)


def _cancel_item(jenkins, number, scope):
    try:
        response, _ = jenkins.requester.post_form(
            endpoints.CANCEL_QUEUE, query={'id': number}, scope=scope)
    except BadHTTPException as e:
        if e.status == 404:
            raise NotFoundException('queue item[%s] does not exist' % number,
                                    e.status, e.body)
        raise
    return 200 <= response.status_code < 300


class Task(Pollable):
    '''A queue item, the record of a pending build.

    The snapshot has a ``why`` key while the item waits for an executor,
    an ``executable`` key once the build started, and ``cancelled`` set
    when it was taken off the queue.
    '''

    kind = 'queue item'

    def __init__(self, jenkins, number, raw=None):
        base = endpoints.QUEUE_ITEM % {'id': int(number)}
        super(Task, self).__init__(jenkins, base, raw)
        self.id = int(number)

    def get_why(self):
        return self._raw.get('why')

    def get_job_name(self):
        task = self._get('task', {})
        if task.get('url'):
            return endpoints.job_name_from_url(task['url'])
        return task.get('name')

    def get_job(self):
        '''Return the unpolled :class:`jenkinsrest.job.Job` of this item.'''
        return Job(self.jenkins, self.get_job_name())

    def _scan_actions(self, key):
        values = []
        for action in self._get('actions', []):
            if action:
                values.extend(action.get(key) or [])
        return values

    def get_causes(self):
        return self._scan_actions('causes')

    def get_parameters(self):
        return self._scan_actions('parameters')

    def is_cancelled(self):
        return bool(self._get('cancelled', False))

    def get_build_number(self):
        '''Number of the build started for this item, ``int`` or None.'''
        executable = self._raw.get('executable')
        if not executable:
            return None
        return executable.get('number')

    def cancel(self, scope=None):
        return _cancel_item(self.jenkins, self.id, scope)

    def wait_for_build_number(self, interval=1.0, backoff=2.0,
                              max_interval=10.0, scope=None):
        '''Poll the item until a build starts for it.

        :param interval: seconds before the second poll, ``float``
        :param backoff: factor applied to the interval after each poll,
            ``float``
        :param max_interval: upper bound of the interval, ``float``
        :returns: the build number, ``int``, or None if the item was
            cancelled
        '''
        while True:
            self.poll(scope=scope)
            if self.is_cancelled():
                return None
            number = self.get_build_number()
            if number is not None:
                return number
            logger.debug('queue item %d still waiting: %s',
                         self.id, self.get_why())
            if scope is not None:
                scope.wait(interval)
            else:
                time.sleep(interval)
            interval = min(interval * backoff, max_interval)


class Queue(Pollable):

    kind = 'queue'

    def __init__(self, jenkins, raw=None):
        super(Queue, self).__init__(jenkins, endpoints.QUEUE, raw)

    def tasks(self):
        return [Task(self.jenkins, item['id'], item)
                for item in self._get('items', [])]

    def get_task_by_id(self, number):
        for task in self.tasks():
            if task.id == int(number):
                return task
        return None

    def get_tasks_for_job(self, name):
        return [task for task in self.tasks() if task.get_job_name() == name]

    def cancel_task(self, number, scope=None):
        return _cancel_item(self.jenkins, number, scope)
