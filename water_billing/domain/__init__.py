# Water billing domain layer
