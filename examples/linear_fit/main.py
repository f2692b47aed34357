""" Fit y = 2x + 1 with a small network and plot the training error
"""
import logging

import matplotlib.pyplot as plt
import numpy

from t2net import DistributionUnit, Layer, build_network
from t2net.core.logger import setup_logging
from t2net.util.on_sample import log_progress
from t2net.visualize import plot_error_history


setup_logging(filename='linear-fit-log.txt')
logger = logging.getLogger('linear_fit')

random_state = numpy.random.RandomState(1234)

layers = build_network(
    [Layer(nodes=1),
     Layer(nodes=1, activation='linear', bias=1.0)],
    random_state=random_state, weight_scale=0.5)

x = random_state.rand(200)
y = 2 * x + 1

unit = DistributionUnit(layers, 'meanSquaredError', batch_size=1,
                        learning_rate=0.1, random_state=random_state,
                        min_learning_rate=1e-3)
unit.initialize_input_data(x)
unit.initialize_target_data(y)

errors = []
n_epochs = 10

for epoch in range(n_epochs):
    unit.iterate(on_sample=[log_progress(len(x), every=100, logger=logger)])
    errors.extend(unit.errors)

weight = layers[0].collection[0].connected_to[0].weight
logger.info("Learned weight: {:.4f} (expected 2)".format(weight))

plot_error_history(errors)
plt.show()
