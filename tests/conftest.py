'''Expand testscenarios ``scenarios`` into separate pytest test classes.

pytest does not apply testscenarios the way testtools/stestr do, so each
scenario is collected as its own subclass with the scenario attributes set.
'''
import inspect

from _pytest.unittest import UnitTestCase
from testscenarios import TestWithScenarios


def pytest_pycollect_makeitem(collector, name, obj):
    if not (inspect.isclass(obj) and issubclass(obj, TestWithScenarios)):
        return None
    scenarios = getattr(obj, 'scenarios', None)
    if not scenarios:
        return None
    items = []
    for scenario_name, params in scenarios:
        attrs = dict(params)
        attrs['scenarios'] = None
        attrs['__module__'] = obj.__module__
        sub_name = '{0}[{1}]'.format(name, scenario_name)
        subclass = type(sub_name, (obj,), attrs)
        # pytest looks the class up by name on its module
        setattr(collector.obj, sub_name, subclass)
        items.append(UnitTestCase.from_parent(collector, name=sub_name,
                                              obj=subclass))
    return items
